from .flows import FLOWS, UnknownFlowError, get_flow
from .loader import ConfigError, load_config

__all__ = ["FLOWS", "ConfigError", "UnknownFlowError", "get_flow", "load_config"]
