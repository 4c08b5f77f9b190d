# SPDX-License-Identifier: MIT
"""Tests for ccrules.core.target."""

import pytest

from ccrules.core.errors import (
    ConfigurationError,
    DependencyCycleError,
    ToolchainSelectionError,
    UnknownLanguageError,
)
from ccrules.core.target import (
    NO_WHOLE_ARCHIVE,
    WHOLE_ARCHIVE,
    Binary,
    Library,
    LibraryResolvable,
    ObjectFile,
    SelectByToolchain,
    link_libraries,
    merge_includes,
)
from ccrules.toolchains import CLANG, GCC
from ccrules.tools.toolchain import Toolchain, ToolchainRegistry


def include_flags(step):
    return [flag for flag in step.variables["flags"].split() if flag.startswith("-I")]


class TestMergeIncludes:
    def test_first_occurrence_wins(self, tree):
        a, b, c = tree.src("a"), tree.src("b"), tree.src("c")
        assert merge_includes([a, b], [b, c], [a]) == (a, b, c)


class TestObjectFile:
    def test_flags_by_language(self, tree):
        obj = ObjectFile(
            tree.out("a.o"),
            tree.src("a.cpp"),
            includes=[tree.src("inc")],
            cflags=["-DC"],
            cxxflags=["-DCXX"],
        )
        assert obj.flags() == ["-DCXX", f"-I{tree.src('inc').absolute()}"]

    def test_build(self, tree, graph, registry):
        obj = ObjectFile(tree.out("a.o"), tree.src("a.c"), cflags=["-DX"])
        assert obj.build(graph, registry) == tree.out("a.o")
        (step,) = graph.steps
        assert step.rule_name == "GCC-c"
        assert step.inputs == (tree.src("a.c"),)
        assert step.variables["flags"] == "-DX"

    def test_toolchain_override(self, tree, graph, registry):
        obj = ObjectFile(tree.out("a.o"), tree.src("a.c"), toolchain=CLANG)
        obj.build(graph, registry)
        assert graph.steps[0].rule_name == "Clang-c"

    def test_unknown_language(self, tree, graph, registry):
        obj = ObjectFile(tree.out("a.o"), tree.src("a.txt"))
        with pytest.raises(UnknownLanguageError):
            obj.build(graph, registry)


class TestLibraryDeclaration:
    def test_is_library_resolvable(self, tree):
        lib = Library(tree.out("liba.a"), [tree.src("a.c")])
        assert isinstance(lib, LibraryResolvable)
        assert lib.as_library(GCC) is lib

    def test_defaults(self, tree):
        lib = Library(tree.out("liba.a"), [tree.src("a.c")])
        assert lib.deps == ()
        assert lib.includes == ()
        assert lib.always_link is False
        assert lib.toolchain is None
        assert lib.defined_at is not None
        assert lib.defined_at.filename == __file__

    def test_module_defaults_to_declaring_directory(self, tree):
        lib = Library(tree.out("liba.a"), [tree.src("a.c")])
        assert lib.module.absolute() == str(lib.defined_at.directory)

    def test_explicit_module(self, tree):
        lib = Library(tree.out("liba.a"), [tree.src("a.c")], module=tree.src("mod"))
        assert lib.module_include == tree.src("mod/include")

    def test_srcs_required(self, tree):
        with pytest.raises(ConfigurationError, match="Library.srcs"):
            Library(tree.out("liba.a"), None)

    def test_srcs_not_empty(self, tree):
        with pytest.raises(ConfigurationError, match="must not be empty"):
            Library(tree.out("liba.a"), [])

    def test_out_must_be_output_path(self, tree):
        with pytest.raises(ConfigurationError, match="Library.out: expected output path"):
            Library(tree.src("liba.a"), [tree.src("a.c")])

    def test_string_src_rejected(self, tree):
        with pytest.raises(ConfigurationError, match=r"Library.srcs\[0\]"):
            Library(tree.out("liba.a"), ["a.c"])

    def test_srcs_must_be_a_list(self, tree):
        with pytest.raises(ConfigurationError, match="expected list of path, got str"):
            Library(tree.out("liba.a"), "a.c")

    def test_bad_dependency(self, tree):
        with pytest.raises(ConfigurationError, match=r"Library.deps\[0\]"):
            Library(tree.out("liba.a"), [tree.src("a.c")], deps=["libb.a"])

    def test_binary_is_not_a_dependency(self, tree):
        app = Binary(tree.out("app"), [tree.src("main.c")])
        with pytest.raises(ConfigurationError, match="expected dependency"):
            Library(tree.out("liba.a"), [tree.src("a.c")], deps=[app])

    def test_bad_flag(self, tree):
        with pytest.raises(ConfigurationError, match=r"Library.cflags\[1\]"):
            Library(tree.out("liba.a"), [tree.src("a.c")], cflags=["-O2", 3])

    def test_bad_always_link(self, tree):
        with pytest.raises(ConfigurationError, match="expected boolean"):
            Library(tree.out("liba.a"), [tree.src("a.c")], always_link="yes")

    def test_bad_toolchain(self, tree):
        with pytest.raises(ConfigurationError, match="Library.toolchain"):
            Library(tree.out("liba.a"), [tree.src("a.c")], toolchain="GCC")

    def test_error_points_at_declaration(self, tree):
        with pytest.raises(ConfigurationError) as exc_info:
            Library(tree.out("liba.a"), [])
        assert exc_info.value.location is not None
        assert exc_info.value.location.filename == __file__


class TestResolve:
    def test_module_include_always_present(self, tree, registry):
        lib = Library(tree.out("liba.a"), [tree.src("a.c")], module=tree.src("a"))
        resolved = lib.resolve(registry)
        assert resolved.includes == (tree.src("a/include"),)

    def test_own_includes_first(self, tree, registry):
        lib = Library(
            tree.out("liba.a"),
            [tree.src("a.c")],
            includes=[tree.src("a/public")],
            module=tree.src("a"),
        )
        assert lib.resolve(registry).includes == (
            tree.src("a/public"),
            tree.src("a/include"),
        )

    def test_dependency_includes_are_inherited(self, tree, registry):
        c = Library(tree.out("libc.a"), [tree.src("c.c")], includes=[tree.src("c/inc")])
        b = Library(tree.out("libb.a"), [tree.src("b.c")], deps=[c])
        a = Library(tree.out("liba.a"), [tree.src("a.c")], deps=[b])
        includes = a.resolve(registry).includes
        assert tree.src("c/inc") in includes

    def test_diamond_includes_once(self, tree, registry):
        d = Library(
            tree.out("libd.a"),
            [tree.src("d.c")],
            includes=[tree.src("d/inc")],
            module=tree.src("d"),
        )
        b = Library(tree.out("libb.a"), [tree.src("b.c")], deps=[d], module=tree.src("b"))
        c = Library(tree.out("libc.a"), [tree.src("c.c")], deps=[d], module=tree.src("c"))
        a = Library(tree.out("liba.a"), [tree.src("a.c")], deps=[b, c], module=tree.src("a"))
        resolved = a.resolve(registry)
        assert list(resolved.dependencies) == [b, d, c]
        assert list(resolved.includes).count(tree.src("d/inc")) == 1
        assert list(resolved.includes).count(tree.src("d/include")) == 1

    def test_resolve_is_idempotent(self, tree, registry):
        b = Library(tree.out("libb.a"), [tree.src("b.c")])
        a = Library(tree.out("liba.a"), [tree.src("a.c")], deps=[b])
        assert a.resolve(registry) == a.resolve(registry)
        assert a.includes == ()

    def test_cycle(self, tree, registry):
        a = Library(tree.out("liba.a"), [tree.src("a.c")])
        b = Library(tree.out("libb.a"), [tree.src("b.c")], deps=[a])
        a.deps = (b,)
        with pytest.raises(DependencyCycleError):
            a.resolve(registry)

    def test_toolchain_stddeps(self, tree, registry):
        runtime = Library(tree.out("librt.a"), [tree.src("rt.c")])
        toolchain = Toolchain(
            name="RT", c_compiler="cc", archiver="ar", linker="cc", stddeps=[runtime]
        )
        app = Binary(tree.out("app"), [tree.src("main.c")], toolchain=toolchain)
        resolved = app.resolve(registry)
        assert resolved.dependencies == (runtime,)

    def test_dependency_toolchain_stddep_includes_propagate(self, tree, registry):
        runtime = Library(
            tree.out("librt.a"),
            [tree.src("rt/rt.c")],
            includes=[tree.src("rt/inc")],
            module=tree.src("rt"),
        )
        toolchain = Toolchain(
            name="RT", c_compiler="cc", archiver="ar", linker="cc", stddeps=[runtime]
        )
        lib = Library(
            tree.out("libl.a"),
            [tree.src("l/l.c")],
            toolchain=toolchain,
            module=tree.src("l"),
        )
        app = Binary(tree.out("app"), [tree.src("main.c")], deps=[lib], module=tree.src("app"))

        lib_includes = lib.resolve(registry).includes
        app_includes = app.resolve(registry).includes
        assert tree.src("rt/inc") in lib_includes
        assert set(lib_includes) <= set(app_includes)
        assert app_includes == (
            tree.src("app/include"),
            tree.src("l/include"),
            tree.src("rt/inc"),
            tree.src("rt/include"),
        )
        # Link dependencies still come from the binary's own toolchain
        assert app.resolve(registry).dependencies == (lib,)

    def test_stddep_of_its_own_toolchain(self, tree):
        runtime = Library(tree.out("librt.a"), [tree.src("rt.c")], module=tree.src("rt"))
        toolchain = Toolchain(
            name="RT", c_compiler="cc", archiver="ar", linker="cc", stddeps=[runtime]
        )
        registry = ToolchainRegistry().register_as_default(toolchain)
        app = Binary(tree.out("app"), [tree.src("main.c")], module=tree.src("app"))
        assert runtime.resolve(registry).includes == (tree.src("rt/include"),)
        assert app.resolve(registry).includes == (
            tree.src("app/include"),
            tree.src("rt/include"),
        )

    def test_effective_includes_are_union_of_dependencies(self, tree, registry):
        d = Library(tree.out("libd.a"), [tree.src("d.c")], module=tree.src("d"))
        b = Library(tree.out("libb.a"), [tree.src("b.c")], deps=[d], module=tree.src("b"))
        c = Library(tree.out("libc.a"), [tree.src("c.c")], deps=[d], module=tree.src("c"))
        a = Library(tree.out("liba.a"), [tree.src("a.c")], deps=[b, c], module=tree.src("a"))
        expected = set(a.declared_includes())
        for dep in (b, c, d):
            expected |= set(dep.resolve(registry).includes)
        assert set(a.resolve(registry).includes) == expected

    def test_requested_toolchain_must_be_default(self, tree, registry):
        lib = Library(tree.out("liba.a"), [tree.src("a.c")])
        with pytest.raises(ToolchainSelectionError):
            lib.resolve(registry.register(CLANG).with_requested("Clang"))

    def test_requesting_default_is_fine(self, tree, registry):
        lib = Library(tree.out("liba.a"), [tree.src("a.c")])
        assert lib.resolve(registry.with_requested("GCC")).toolchain is GCC


class TestLibraryBuild:
    def test_library_with_dependency(self, tree, graph, registry):
        dep = Library(
            tree.out("libdep.a"),
            [tree.src("dep/dep.c")],
            includes=[tree.src("dep/public")],
            module=tree.src("dep"),
        )
        lib = Library(
            tree.out("liblib.a"),
            [tree.src("lib/one.cpp"), tree.src("lib/two.c")],
            deps=[dep],
            includes=[tree.src("dep/public")],
            module=tree.src("lib"),
        )
        dep.build(graph, registry)
        assert lib.build(graph, registry) == tree.out("liblib.a")

        compiles = [s for s in graph.steps if s.rule_name in ("GCC-c", "GCC-cxx")]
        archives = graph.steps_for_rule("GCC-ar")
        assert len(compiles) == 3
        assert len(archives) == 2

        expected = [
            f"-I{tree.src('dep/public').absolute()}",
            f"-I{tree.src('lib/include').absolute()}",
            f"-I{tree.src('dep/include').absolute()}",
        ]
        for step in compiles[1:]:
            assert include_flags(step) == expected

    def test_archive_step(self, tree, graph, registry):
        lib = Library(tree.out("libx.a"), [tree.src("x/a.c"), tree.src("x/b.s")])
        lib.build(graph, registry)
        (archive,) = graph.steps_for_rule("GCC-ar")
        assert archive.outputs == (tree.out("libx.a"),)
        assert archive.inputs == (tree.out("x/a.o"), tree.out("x/b.o"))
        assert [s.rule_name for s in graph.steps] == ["GCC-c", "GCC-as", "GCC-ar"]

    def test_flags_per_language(self, tree, graph, registry):
        lib = Library(
            tree.out("libx.a"),
            [tree.src("a.c"), tree.src("b.cc")],
            cflags=["-DFROM_C"],
            cxxflags=["-DFROM_CXX"],
            module=tree.src("x"),
        )
        lib.build(graph, registry)
        c_step, cxx_step, _ = graph.steps
        assert c_step.variables["flags"].startswith("-DFROM_C ")
        assert cxx_step.variables["flags"].startswith("-DFROM_CXX ")

    def test_unknown_source_fails(self, tree, graph, registry):
        lib = Library(tree.out("libx.a"), [tree.src("readme.txt")])
        with pytest.raises(UnknownLanguageError):
            lib.build(graph, registry)


class TestLinkLibraries:
    def test_bracket_always_present(self):
        assert link_libraries([]) == f"{WHOLE_ARCHIVE} {NO_WHOLE_ARCHIVE}"


class TestBinaryBuild:
    def test_whole_archive_partition(self, tree, graph, registry):
        l3 = Library(tree.out("libl3.a"), [tree.src("l3.c")])
        l2 = Library(tree.out("libl2.a"), [tree.src("l2.c")], deps=[l3])
        l1 = Library(tree.out("libl1.a"), [tree.src("l1.c")], always_link=True)
        app = Binary(tree.out("app"), [tree.src("main.c")], deps=[l1, l2])
        app.build(graph, registry)

        (link,) = graph.steps_for_rule("GCC-ld")
        assert link.variables["libs"] == " ".join(
            [
                "-Wl,--whole-archive",
                l1.out.absolute(),
                "-Wl,--no-whole-archive",
                l2.out.absolute(),
                l3.out.absolute(),
            ]
        )

    def test_normal_libraries_outside_bracket(self, tree, graph, registry):
        normal = Library(tree.out("libn.a"), [tree.src("n.c")])
        forced = Library(tree.out("libf.a"), [tree.src("f.c")], deps=[normal], always_link=True)
        app = Binary(tree.out("app"), [tree.src("main.c")], deps=[forced])
        app.build(graph, registry)
        libs = graph.steps_for_rule("GCC-ld")[0].variables["libs"]
        inside, outside = libs.split(NO_WHOLE_ARCHIVE)
        assert forced.out.absolute() in inside
        assert normal.out.absolute() not in inside
        assert normal.out.absolute() in outside

    def test_diamond_link_order_is_preorder(self, tree, graph, registry):
        d = Library(tree.out("libd.a"), [tree.src("d.c")])
        b = Library(tree.out("libb.a"), [tree.src("b.c")], deps=[d])
        c = Library(tree.out("libc.a"), [tree.src("c.c")], deps=[d])
        app = Binary(tree.out("app"), [tree.src("main.c")], deps=[b, c])
        app.build(graph, registry)
        libs = graph.steps_for_rule("GCC-ld")[0].variables["libs"]
        # The shared library stays at its first position, ahead of c
        assert libs.split(NO_WHOLE_ARCHIVE)[1].split() == [
            b.out.absolute(),
            d.out.absolute(),
            c.out.absolute(),
        ]

    def test_diamond_shared_library_always_linked(self, tree, graph, registry):
        d = Library(tree.out("libd.a"), [tree.src("d.c")], always_link=True)
        b = Library(tree.out("libb.a"), [tree.src("b.c")], deps=[d])
        c = Library(tree.out("libc.a"), [tree.src("c.c")], deps=[d])
        app = Binary(tree.out("app"), [tree.src("main.c")], deps=[b, c])
        app.build(graph, registry)
        libs = graph.steps_for_rule("GCC-ld")[0].variables["libs"]
        inside, outside = libs.split(NO_WHOLE_ARCHIVE)
        assert inside.split() == [WHOLE_ARCHIVE, d.out.absolute()]
        assert outside.split() == [b.out.absolute(), c.out.absolute()]

    def test_link_step(self, tree, graph, registry):
        lib = Library(tree.out("liba.a"), [tree.src("a.c")])
        app = Binary(
            tree.out("bin/app"),
            [tree.src("main.c"), tree.src("util.cpp")],
            deps=[lib],
            ldflags=["-static"],
            ldflags_post=["-lm", "-lpthread"],
        )
        assert app.build(graph, registry) == tree.out("bin/app")
        (link,) = graph.steps_for_rule("GCC-ld")
        main_o = tree.out("main.o")
        util_o = tree.out("util.o")
        assert link.outputs == (tree.out("bin/app"),)
        assert link.inputs == (main_o, util_o, lib.out)
        assert link.variables["ldflags"] == "-static"
        assert link.variables["ldflags_post"] == "-lm -lpthread"
        assert link.variables["objs"] == f"{main_o.absolute()} {util_o.absolute()}"

    def test_binary_rejects_bad_ldflags(self, tree):
        with pytest.raises(ConfigurationError, match="Binary.ldflags"):
            Binary(tree.out("app"), [tree.src("main.c")], ldflags="-static")


class TestSelectByToolchain:
    def test_picks_by_name(self, tree):
        gcc_lib = Library(tree.out("libgcc_x.a"), [tree.src("x.c")])
        clang_lib = Library(tree.out("libclang_x.a"), [tree.src("x.c")])
        select = SelectByToolchain({"GCC": gcc_lib, "Clang": clang_lib})
        assert isinstance(select, LibraryResolvable)
        assert select.as_library(GCC) is gcc_lib
        assert select.as_library(CLANG) is clang_lib

    def test_default(self, tree):
        fallback = Library(tree.out("libx.a"), [tree.src("x.c")])
        assert SelectByToolchain({}, default=fallback).as_library(GCC) is fallback

    def test_missing(self):
        with pytest.raises(ConfigurationError, match="no library for toolchain 'GCC'"):
            SelectByToolchain({}).as_library(GCC)

    def test_used_as_dependency(self, tree, graph, registry):
        gcc_lib = Library(tree.out("libgcc_x.a"), [tree.src("x.c")])
        app = Binary(
            tree.out("app"),
            [tree.src("main.c")],
            deps=[SelectByToolchain({"GCC": gcc_lib})],
        )
        assert app.resolve(registry).dependencies == (gcc_lib,)

    def test_rejects_non_dependency(self):
        with pytest.raises(ConfigurationError):
            SelectByToolchain({"GCC": "libx.a"})
