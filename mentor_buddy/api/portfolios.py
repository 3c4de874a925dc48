from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from mentor_buddy.api.buddies import load_visible_buddy
from mentor_buddy.api.dependencies import CurrentUser
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.models.library import Portfolio
from mentor_buddy.services import library_service

router = APIRouter(tags=["portfolios"])


class LinkIn(BaseModel):
    label: str
    url: str
    type: str = "other"


class PortfolioOut(BaseModel):
    id: UUID
    buddyId: UUID
    title: str
    description: str
    technologies: list[str]
    links: list[LinkIn]
    resourceUrl: str | None = None
    resourceType: str | None = None
    resourceName: str | None = None
    completedAt: datetime | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def portfolio_out(p: Portfolio) -> PortfolioOut:
    return PortfolioOut(
        id=p.id,
        buddyId=p.buddy_id,
        title=p.title,
        description=p.description,
        technologies=list(p.technologies),
        links=[LinkIn(label=l.label, url=l.url, type=l.type) for l in p.links],
        resourceUrl=p.resource_url,
        resourceType=p.resource_type,
        resourceName=p.resource_name,
        completedAt=p.completed_at,
        createdAt=p.created_at,
        updatedAt=p.updated_at,
    )


class PortfolioIn(BaseModel):
    title: str
    description: str = ""
    technologies: list[str] = []
    links: list[LinkIn] = []
    resourceUrl: str | None = None
    resourceType: str | None = None
    resourceName: str | None = None
    completedAt: datetime | None = None


class PortfolioUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    technologies: list[str] | None = None
    links: list[LinkIn] | None = None
    resourceUrl: str | None = None
    resourceType: str | None = None
    resourceName: str | None = None
    completedAt: datetime | None = None


_FIELDS = {
    "title": "title",
    "description": "description",
    "technologies": "technologies",
    "links": "links",
    "resourceUrl": "resource_url",
    "resourceType": "resource_type",
    "resourceName": "resource_name",
    "completedAt": "completed_at",
}


@router.get("/api/buddies/{buddy_id}/portfolios", response_model=list[PortfolioOut])
def list_portfolios(buddy_id: UUID, principal: CurrentUser) -> list[PortfolioOut]:
    load_visible_buddy(principal, buddy_id)
    return [portfolio_out(p) for p in library_service.list_portfolios(buddy_id)]


@router.post(
    "/api/buddies/{buddy_id}/portfolio",
    response_model=PortfolioOut,
    status_code=status.HTTP_201_CREATED,
)
def create_portfolio(
    buddy_id: UUID, payload: PortfolioIn, principal: CurrentUser
) -> PortfolioOut:
    data = payload.model_dump()
    try:
        portfolio = library_service.create_portfolio(
            principal,
            buddy_id,
            title=data.pop("title"),
            description=data.pop("description"),
            links=data.pop("links"),
            technologies=data.pop("technologies"),
            **{_FIELDS[k]: v for k, v in data.items()},
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return portfolio_out(portfolio)


@router.patch("/api/portfolios/{portfolio_id}", response_model=PortfolioOut)
def update_portfolio(
    portfolio_id: UUID, payload: PortfolioUpdateIn, principal: CurrentUser
) -> PortfolioOut:
    changes = {
        _FIELDS[k]: v
        for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items()
    }
    try:
        portfolio = library_service.update_portfolio(principal, portfolio_id, **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    return portfolio_out(portfolio)


@router.delete("/api/portfolios/{portfolio_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_portfolio(portfolio_id: UUID, principal: CurrentUser) -> Response:
    try:
        library_service.delete_portfolio(principal, portfolio_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
