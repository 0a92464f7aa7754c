from __future__ import annotations

import copy

from pydantic import BaseModel, ConfigDict, Field

from openga.exceptions import (
    MissingOperatorError,
    OperatorSelectionPolicyConflictError,
)
from openga.operators.base import Operator
from openga.policies.adaptive_pursuit import AdaptivePursuitPolicy
from openga.policies.base import OperatorSelectionPolicy
from openga.policies.simple import CustomWeightPolicy, FirstChoicePolicy


class OperatorRegistration(BaseModel):
    """Operators of one family together with an optional selection policy."""

    operators: list[Operator] = Field(
        default_factory=list, description="Candidate operators of one family"
    )
    policy: OperatorSelectionPolicy | None = Field(
        default=None,
        description="Explicit selection policy (None = chosen automatically)",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def of(
        cls, *operators: Operator, policy: OperatorSelectionPolicy | None = None
    ) -> OperatorRegistration:
        return cls(operators=list(operators), policy=policy)

    @property
    def has_custom_weights(self) -> bool:
        return any(op.custom_weight > 0 for op in self.operators)

    def validate_policy(self, family: str = "operator") -> None:
        """Reject custom weights paired with a policy that would ignore them."""
        if not self.operators:
            raise MissingOperatorError(f"No {family} operators registered")
        if (
            self.has_custom_weights
            and self.policy is not None
            and not isinstance(self.policy, CustomWeightPolicy)
        ):
            raise OperatorSelectionPolicyConflictError(
                f"{family} operators declare custom weights but the configured "
                f"policy is {type(self.policy).__name__}; use CustomWeightPolicy "
                "or remove the weights"
            )

    def resolve_policy(self, family: str = "operator") -> OperatorSelectionPolicy:
        """Pick the effective policy and register the operators with it.

        A single operator always uses first-choice selection. Otherwise an
        explicit policy wins; custom weights imply weighted selection and
        the fallback is adaptive pursuit. An explicit policy is copied, so
        every caller gets its own selection state.
        """
        self.validate_policy(family)
        if len(self.operators) == 1:
            policy: OperatorSelectionPolicy = FirstChoicePolicy()
        elif self.policy is not None:
            policy = copy.deepcopy(self.policy)
        elif self.has_custom_weights:
            policy = CustomWeightPolicy()
        else:
            policy = AdaptivePursuitPolicy()
        policy.apply_operators(self.operators)
        return policy
