# herd_sim/sim/errors.py

class HerdSimError(Exception):
    pass

class ConfigurationMissing(HerdSimError):
    """Level or deterrent catalog is absent or malformed."""

class UnknownDeterrentType(HerdSimError, KeyError):
    def __init__(self, kind: str):
        super().__init__(kind)
        self.kind = kind

    def __str__(self) -> str:
        return f"unknown deterrent type: {self.kind!r}"
