"""
Utility functions for Ledgerly.

This package contains:
- datetime_utils: UTC helpers, ISO date parsing, named period ranges
- decimal_utils: Numeric column precision helpers for money amounts
"""
