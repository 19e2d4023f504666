"""Budget ledger API endpoints"""
from fastapi import APIRouter, HTTPException, Depends, status
from studykit.database import DocumentStore, get_store
from studykit.errors import ToolkitError
from studykit.models.resources import BudgetEntryCreate, BudgetSummary
from studykit.services.resources import BudgetResource
from studykit.utils.monitoring import StructuredLogger

router = APIRouter()


def get_budget(store: DocumentStore = Depends(get_store)) -> BudgetResource:
    return BudgetResource(store)


def _failure(e: Exception, function: str, action: str) -> HTTPException:
    StructuredLogger.log_error(e, context={"function": function})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}",
    )


@router.get("")
async def list_budget_entries(budget: BudgetResource = Depends(get_budget)):
    """Get all budget entries"""
    try:
        return await budget.list()
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "list_budget_entries", "fetch budget entries")


@router.get("/summary", response_model=BudgetSummary)
async def budget_summary(budget: BudgetResource = Depends(get_budget)):
    """Income, expense and balance totals"""
    try:
        return await budget.summary()
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "budget_summary", "summarize budget")


@router.get("/{entry_id}")
async def get_budget_entry(entry_id: str, budget: BudgetResource = Depends(get_budget)):
    try:
        return await budget.get(entry_id)
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "get_budget_entry", "fetch budget entry")


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_budget_entry(
    payload: BudgetEntryCreate,
    budget: BudgetResource = Depends(get_budget),
):
    """Add an income or expense entry"""
    try:
        return await budget.create(payload.model_dump(mode="json"))
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "add_budget_entry", "add budget entry")


@router.put("/{entry_id}")
async def replace_budget_entry(
    entry_id: str,
    payload: BudgetEntryCreate,
    budget: BudgetResource = Depends(get_budget),
):
    """Replace a budget entry and return the new version"""
    try:
        return await budget.replace(entry_id, payload.model_dump(mode="json"))
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "replace_budget_entry", "update budget entry")


@router.delete("/{entry_id}")
async def delete_budget_entry(entry_id: str, budget: BudgetResource = Depends(get_budget)):
    try:
        await budget.delete(entry_id)
        return {"message": "Budget entry deleted"}
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "delete_budget_entry", "delete budget entry")
