# SPDX-License-Identifier: MIT
"""Core target model and build-action synthesis."""
