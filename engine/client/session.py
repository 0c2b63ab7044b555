"""
Builder session state passed explicitly between the controller and the UI
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from client.store_draft import DraftValidationError, StoreDraft
from services.store_schema import Customization


class GenerationState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class BuilderSession:
    """Everything one editing session owns"""
    auth_token: Optional[str]
    model: Optional[str] = None
    draft: StoreDraft = field(default_factory=StoreDraft)
    customization: Optional[Customization] = None
    credits_remaining: Optional[int] = None
    state: GenerationState = GenerationState.IDLE
    error: Optional[str] = None
    hint: Optional[str] = None

    @property
    def can_submit(self) -> bool:
        return self.state != GenerationState.GENERATING

    def customize(self, **changes: Any) -> Customization:
        """
        Change individual style settings of the current customization.

        Keys use the wire names (primaryColor, accentColor, font, layout,
        paymentsEnabled).
        """
        if self.customization is None:
            raise DraftValidationError("Generate a store before customizing it")

        data = self.customization.model_dump(by_alias=True)
        data.update(changes)
        try:
            self.customization = Customization.model_validate(data)
        except ValidationError as e:
            raise DraftValidationError(str(e))
        return self.customization
