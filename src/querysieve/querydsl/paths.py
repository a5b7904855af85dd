"""Null-safe member access trees.

`ExpressionPathBuilder.build` walks a resolved member chain from the record
placeholder and returns the access expression together with an accumulated
null guard:

- filter mode ANDs `link is not null` for every nullable intermediate link
  (and for the final link once the filter value is known to be non-null);
- sort mode ORs `link is null` for every nullable link so the sort key can
  fall back to a default value.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..members import Member, MemberKind, is_nullable, resolve_chain
from ..types import TypeHint
from .nodes import Access, Expr, Invoke, Parameter

__all__ = ("ExpressionPathBuilder", "PathExpression")


@dataclass(frozen=True)
class PathExpression:
    access: Expr
    null_check: Optional[Expr]
    type: TypeHint


class ExpressionPathBuilder:
    """Build access expressions for dotted property paths."""

    def build(
        self,
        parameter: Parameter,
        members: Optional[Sequence[Member]],
        full_name: str,
        for_filter: bool,
        is_value_null: Optional[bool] = None,
        disable_null_guard: Optional[bool] = None,
    ) -> PathExpression:
        """Build the access chain for `full_name` against `parameter`.

        Args:
            parameter: Placeholder for the current record
            members: Resolved member chain; resolved from `full_name` when missing
            full_name: Canonical dotted path
            for_filter: Filter mode (AND of not-null checks) or sort mode (OR of null checks)
            is_value_null: Whether the filter value is the null literal, if already known
            disable_null_guard: Sort mode only; None or True skips the null checks

        Returns:
            PathExpression with the access node, the accumulated null guard and the final type
        """
        if members is None or len(members) != len(full_name.split(".")):
            members = resolve_chain(parameter.type, full_name)

        head: Expr = parameter
        null_check: Optional[Expr] = None
        last = len(members) - 1
        for index, member in enumerate(members):
            head = self._member_access(head, parameter, member)
            null_check = self.null_check(
                head,
                null_check,
                for_filter,
                is_value_null,
                (index == last) if for_filter else None,
                disable_null_guard,
            )
        return PathExpression(head, null_check, head.result_type)

    @staticmethod
    def _member_access(head: Expr, parameter: Parameter, member: Member) -> Expr:
        if member.kind is MemberKind.STATIC:
            return Invoke(member.expression, head, member.value_type)
        access = Access(head, member.name, member.type)
        if member.kind is MemberKind.COMPUTED and head is parameter:
            return Invoke(access, parameter, member.value_type)
        return access

    @staticmethod
    def null_check(
        expression: Expr,
        current: Optional[Expr],
        for_filter: bool,
        is_value_null: Optional[bool],
        final_member: Optional[bool],
        disable_null_guard: Optional[bool],
    ) -> Optional[Expr]:
        """Fold the null check of `expression` into the running guard `current`."""
        if not is_nullable(expression.result_type):
            return current

        if for_filter:
            if is_value_null is False or final_member is False:
                check = expression.is_not_null()
                return check if current is None else current & check
        elif disable_null_guard is False:
            check = expression.is_null()
            return check if current is None else current | check

        return current
