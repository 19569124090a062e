"""Domain policies package."""

from .account_records import describe_record_problems, is_valid_account_name

__all__ = ["describe_record_problems", "is_valid_account_name"]
