"""Bundling — discover component sources and compile them to modules."""

from warble.bundler.compiler import KidaCompiler
from warble.bundler.orchestrator import BundleOrchestrator
from warble.bundler.types import CompiledOutput, CompileResult, ComponentCompiler, ModuleInfo

__all__ = [
    "BundleOrchestrator",
    "CompileResult",
    "CompiledOutput",
    "ComponentCompiler",
    "KidaCompiler",
    "ModuleInfo",
]
