__all__ = ("ReqcacheError", "ConstructionError", "ConfigurationError")


class ReqcacheError(Exception): ...


class ConstructionError(ReqcacheError, TypeError): ...


class ConfigurationError(ReqcacheError, ValueError): ...
