# SPDX-License-Identifier: MIT
"""Build file generators for ccrules."""

from ccrules.generators.compile_commands import CompileCommandsGenerator
from ccrules.generators.generator import BaseGenerator, Generator
from ccrules.generators.mermaid import MermaidGenerator
from ccrules.generators.ninja import NinjaGenerator

__all__ = [
    "BaseGenerator",
    "CompileCommandsGenerator",
    "Generator",
    "MermaidGenerator",
    "NinjaGenerator",
]
