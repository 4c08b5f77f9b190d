# SPDX-License-Identifier: MIT
"""Build configuration."""
