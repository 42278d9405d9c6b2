"""Errors raised while resolving propagation selectors."""

from __future__ import annotations


class SelectorError(ValueError):
    """A propagation directive on an object is malformed."""

    def __init__(self, message: str, *, annotation: str = "") -> None:
        self.annotation = annotation
        if annotation:
            message = f"while parsing {annotation!r}: {message}"
        super().__init__(message)


class SelectorSyntaxError(SelectorError):
    """Label-selector expression could not be parsed."""

    def __init__(
        self,
        message: str,
        *,
        expression: str = "",
        position: int | None = None,
        annotation: str = "",
    ) -> None:
        self.expression = expression
        self.position = position
        if position is not None:
            message = f"{message} at position {position} in {expression!r}"
        super().__init__(message, annotation=annotation)

    def for_annotation(self, annotation: str) -> SelectorSyntaxError:
        """Return a copy of this error scoped to an annotation key."""
        scoped = SelectorSyntaxError(
            str(self), expression=self.expression, annotation=annotation
        )
        scoped.position = self.position
        return scoped


class InvalidNamespaceNameError(SelectorError):
    """Tree selector references a string that is not a namespace name."""

    def __init__(self, namespace: str, problems: list[str], *, annotation: str) -> None:
        self.namespace = namespace
        self.problems = problems
        super().__init__(
            f"{namespace!r} is not a valid namespace name: {'; '.join(problems)}",
            annotation=annotation,
        )


class MultipleNonNegatedError(SelectorError):
    """Tree selector targets more than one explicit namespace."""

    def __init__(self, namespaces: list[str], *, annotation: str) -> None:
        self.namespaces = namespaces
        super().__init__(
            "should only have one non-negated namespace, but got multiple: "
            + ", ".join(namespaces),
            annotation=annotation,
        )


class InvalidFlagError(SelectorError):
    """Boolean flag annotation holds something other than a boolean literal."""

    def __init__(self, value: str, *, annotation: str) -> None:
        self.value = value
        super().__init__(f"{value!r} is not a boolean", annotation=annotation)


class InternalSelectorError(RuntimeError):
    """Rebuilt selector failed to parse after validation succeeded."""

    def __init__(self, message: str, *, annotation: str) -> None:
        self.annotation = annotation
        super().__init__(f"internal error while parsing {annotation!r}: {message}")
