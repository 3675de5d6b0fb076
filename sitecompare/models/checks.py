"""Site check definitions: menus to verify and form flows to drive."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class Action(BaseModel):
    action_type: str  # navigate, click, fill, select, hover, wait, wait_for_url, block_resources
    selector: Optional[str] = None
    value: Optional[str] = None
    description: str = ""


class MenuCheck(BaseModel):
    name: str
    menu_selector: str
    submenu_selector: str
    links_selector: str


class FormFlow(BaseModel):
    name: str
    start_url: str  # absolute, or relative to the staging base URL
    steps: list[Action] = Field(default_factory=list)
    submit_selector: str
    expect_navigation: bool = False
    expected_url_fragment: Optional[str] = None
    confirmation_selector: str
    expected_confirmation_text: str
    confirmation_timeout_ms: int = Field(default=30000, gt=0)
