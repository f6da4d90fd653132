"""FastAPI application for search planning

Provides REST API endpoints for:
- Health checking
- Search string generation
- Work assignment across accounts (no browser involved)
"""
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__
from .config import SearchConfig
from .credentials import find_duplicate_keys
from .models import Credential, InvestigationRecord, PlatformType, SearchGrouping
from .partition import partition_search_strings
from .search_logging import configure_logging
from .search_strings import generate_by_grouping

app = FastAPI(
    title="Social Search Planner",
    description="Generates search strings and spreads them across social media accounts",
    version=__version__,
)


# === Request/Response Models ===

class RecordRequest(BaseModel):
    """One investigation record"""
    company_name: str
    product_names: List[str] = []
    incident_keywords: List[str] = []
    search_options: Dict[str, Any] = {}

    def to_record(self) -> InvestigationRecord:
        return InvestigationRecord(
            company_name=self.company_name,
            product_names=tuple(self.product_names),
            incident_keywords=tuple(self.incident_keywords),
            search_options=dict(self.search_options),
        )


class AccountRequest(BaseModel):
    """An account to assign work to - passwords are not needed for planning"""
    type: PlatformType
    username: str


class SearchStringsRequest(BaseModel):
    """Request model for search string generation"""
    records: List[RecordRequest]
    group_by: SearchGrouping = SearchGrouping.BY_INCIDENT


class PlanRequest(SearchStringsRequest):
    """Request model for work assignment"""
    accounts: List[AccountRequest]


# === API Endpoints ===

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": __version__}


@app.post("/search-strings")
async def search_strings(request: SearchStringsRequest):
    """Generate search strings

    Returns:
        JSON with search string -> descriptor
    """
    generated = generate_by_grouping([r.to_record() for r in request.records], request.group_by)
    return {
        "status": "success",
        "search_strings": generated,
        "count": len(generated),
    }


@app.post("/plan")
async def plan(request: PlanRequest):
    """Generate search strings and split them across accounts

    Returns:
        JSON with search strings and the credential key -> search strings assignment

    Raises:
        400 if two accounts share a platform and username, or no accounts are given
    """
    if not request.accounts:
        raise HTTPException(status_code=400, detail="at least one account is required")

    credentials = [
        Credential(type=account.type, username=account.username, password="")
        for account in request.accounts
    ]
    duplicates = find_duplicate_keys(credentials)
    if duplicates:
        raise HTTPException(
            status_code=400,
            detail={"error": "duplicate_accounts", "duplicate_keys": duplicates},
        )

    generated = generate_by_grouping([r.to_record() for r in request.records], request.group_by)
    return {
        "status": "success",
        "search_strings": generated,
        "assignment": partition_search_strings(credentials, generated),
    }


def serve(config: Optional[SearchConfig] = None) -> None:
    import uvicorn

    config = config or SearchConfig()
    configure_logging()
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    serve()
