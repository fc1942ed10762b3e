"""Client-side orchestration for the HTML/Go conversion service."""

from .builder import build_request
from .config import AppConfig, load_config
from .controller import ConversionController, ControllerState, create_controller
from .environment import HostIdentity, resolve_environment
from .models import ConversionDirection, ConversionOptions, ConversionOutcome, ToCodeRequest, ToMarkupRequest
from .prefixes import PrefixConfig, PrefixField, PrefixStore
from .reconciler import reconcile
from .validation import PreValidator, prevalidate

__all__ = [
    "AppConfig",
    "ControllerState",
    "ConversionController",
    "ConversionDirection",
    "ConversionOptions",
    "ConversionOutcome",
    "HostIdentity",
    "PrefixConfig",
    "PrefixField",
    "PrefixStore",
    "PreValidator",
    "ToCodeRequest",
    "ToMarkupRequest",
    "build_request",
    "create_controller",
    "load_config",
    "prevalidate",
    "reconcile",
    "resolve_environment",
]
