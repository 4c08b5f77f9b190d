# SPDX-License-Identifier: MIT
"""Utilities for ccrules."""
