"""Target name to compiler lookup."""

from types import MappingProxyType

from paam_studio.compiler.android import AndroidCompiler
from paam_studio.compiler.backend import BackendCompiler
from paam_studio.compiler.base import CompilationResult, CompileOptions, Compiler
from paam_studio.compiler.ios import IosCompiler
from paam_studio.compiler.web import WebCompiler
from paam_studio.model.paam import Paam

COMPILERS: MappingProxyType[str, type[Compiler]] = MappingProxyType({
    "web": WebCompiler,
    "android": AndroidCompiler,
    "ios": IosCompiler,
    "backend": BackendCompiler,
})


def get_compiler(target: str) -> Compiler | None:
    compiler_cls = COMPILERS.get(target)
    return compiler_cls() if compiler_cls else None


def compile_paam(paam: Paam, target: str, options: CompileOptions | dict | None = None) -> CompilationResult:
    compiler = get_compiler(target)
    if compiler is None:
        return CompilationResult(
            errors=[f"Unsupported target: {target}. Available: {', '.join(COMPILERS)}"],
            metadata={"target": target},
        )
    return compiler.compile(paam, options)
