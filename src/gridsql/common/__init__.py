"""Shared building blocks used across gridsql layers."""

from gridsql.common.exceptions import ErrorCode, GridSQLError

__all__ = ["ErrorCode", "GridSQLError"]
