"""Lead capture: validate contact forms and store them."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from sitechat.errors import LeadValidationError
from sitechat.models import Lead
from sitechat.stores.base import LeadStore
from sitechat.utils.logger import log_event

logger = logging.getLogger(__name__)

FIELD_MESSAGES = {
    "name": "Please enter your full name",
    "email": "Please enter a valid email address",
}


def _field_name(location: str) -> str:
    """Map a validation error location (an alias) back to the field name."""
    for name, info in Lead.model_fields.items():
        if location in (name, info.alias):
            return name
    return location


def parse_lead(payload: Mapping[str, Any]) -> Lead:
    """
    Validate a form payload.

    Args:
        payload: Form fields, camelCase or snake_case

    Returns:
        Validated lead

    Raises:
        LeadValidationError: Naming the first invalid field
    """
    try:
        return Lead.model_validate(dict(payload))
    except ValidationError as e:
        error = e.errors()[0]
        location = error["loc"][0] if error["loc"] else "form"
        field = _field_name(str(location))
        message = FIELD_MESSAGES.get(field, error["msg"])
        raise LeadValidationError(field, message) from e


class LeadService:
    """Validates leads before anything is written, then stores them."""

    def __init__(self, store: LeadStore):
        self.store = store

    async def submit(self, payload: Mapping[str, Any]) -> Lead:
        """
        Validate and persist one lead.

        Raises:
            LeadValidationError: If the payload is invalid (nothing is stored)
            StoreError: If the insert fails
        """
        lead = parse_lead(payload)
        await self.store.insert_lead(lead)

        log_event(logger, "lead_saved", f"Saved lead from {lead.name}", inquiry_type=lead.inquiry_type)
        return lead

    @staticmethod
    def acknowledgement(lead: Lead) -> str:
        return f"Thanks {lead.name}! Your inquiry has been received."
