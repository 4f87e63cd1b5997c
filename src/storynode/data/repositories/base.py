"""Base repository implementation for JSON story documents."""
from __future__ import annotations

from pathlib import Path
from typing import Generic, List, TypeVar

from storynode.data.errors import DataValidationError

T = TypeVar("T")


class ValidationHelpers:
    """Structural checks shared by the parser and repositories."""

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _require_list(value: object, context: str) -> List[object]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list if provided.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _optional_str(value: object, context: str) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string if provided.")
        return value

    @staticmethod
    def _optional_target(value: object, context: str) -> str | None:
        """Node reference; an empty string means no target."""
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a node id string if provided.")
        return value

    @staticmethod
    def _optional_number(value: object, context: str) -> float | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DataValidationError(f"{context} must be a number if provided.")
        return value

    @staticmethod
    def _optional_int(value: object, context: str) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DataValidationError(f"{context} must be an integer if provided.")
        if isinstance(value, float):
            if not value.is_integer():
                raise DataValidationError(f"{context} must be an integer if provided.")
            return int(value)
        return value

    @classmethod
    def _optional_non_negative_int(cls, value: object, context: str) -> int | None:
        coerced = cls._optional_int(value, context)
        if coerced is not None and coerced < 0:
            raise DataValidationError(f"{context} must be non-negative if provided.")
        return coerced

    @staticmethod
    def _optional_bool(value: object, context: str, default: bool = False) -> bool:
        if value is None:
            return default
        if not isinstance(value, bool):
            raise DataValidationError(f"{context} must be a boolean if provided.")
        return value

    @staticmethod
    def _require_scalar(value: object, context: str) -> int | float | str | bool:
        if isinstance(value, (int, float, str, bool)):
            return value
        raise DataValidationError(f"{context} must be a number, string or boolean.")

    @staticmethod
    def _optional_scalar(value: object, context: str) -> int | float | str | bool | None:
        if value is None or isinstance(value, (int, float, str, bool)):
            return value
        raise DataValidationError(f"{context} must be a number, string or boolean.")


class RepositoryBase(ValidationHelpers, Generic[T]):
    """Common caching and loading behavior for repositories."""

    def __init__(self, base_path: Path | str) -> None:
        self._base_path = Path(base_path)
        self._value: T | None = None

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _load_raw(self) -> dict[str, object]:
        """Read the raw document from disk."""
        raise NotImplementedError

    def _build(self, raw: dict[str, object]) -> T:
        """Convert a raw dict into typed definitions."""
        raise NotImplementedError

    def load(self) -> T:
        """Return the parsed document, loading it on first use."""
        if self._value is None:
            self._value = self._build(self._load_raw())
        return self._value

    def reload(self) -> T:
        self._value = None
        return self.load()
