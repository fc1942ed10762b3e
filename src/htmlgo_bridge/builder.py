from __future__ import annotations

from .errors import BuildError, ErrorCode
from .models import ConversionDirection, ConversionOptions, ConversionRequest, ToCodeRequest, ToMarkupRequest
from .prefixes import PrefixConfig
from .validation import PreValidator, ValidationOutcome

EMPTY_INPUT_MESSAGES: dict[ConversionDirection, str] = {
    ConversionDirection.TO_CODE: "Please enter HTML in the markup editor",
    ConversionDirection.TO_MARKUP: "Please enter Go code in the code editor",
}

_default_validator = PreValidator()


def build_request(
    direction: ConversionDirection,
    source_text: str,
    prefixes: PrefixConfig,
    options: ConversionOptions | None = None,
    *,
    validator: PreValidator | None = None,
) -> tuple[ConversionRequest, ValidationOutcome | None]:
    """Build the request for *direction* from the source editor text.

    Reverse requests go through the pre-validator first; the returned outcome
    tells whether the code was rewritten. Raises :class:`BuildError` on empty
    input or a local structural defect.
    """

    direction = ConversionDirection(direction)
    if not source_text.strip():
        raise BuildError(ErrorCode.EMPTY_INPUT, EMPTY_INPUT_MESSAGES[direction])

    if direction is ConversionDirection.TO_CODE:
        opts = options or ConversionOptions()
        return ToCodeRequest(markup=source_text, prefixes=prefixes, children_mode=opts.children_mode), None

    outcome = (validator or _default_validator).run(source_text)
    if outcome.rejected:
        raise BuildError(
            ErrorCode.LOCAL_STRUCTURAL_DEFECT,
            outcome.diagnostic or "Go code failed local validation",
            rule=outcome.rule,
        )
    return ToMarkupRequest(code=outcome.code), outcome


__all__ = ["EMPTY_INPUT_MESSAGES", "build_request"]
