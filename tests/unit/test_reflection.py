"""
Unit tests for class reflection.
"""

import inspect
from typing import Any, Literal, Optional

import pytest

import sample_services
from postponed_services import UsesTypeChecking
from sample_services import (
    Box,
    ClassX,
    ClassY,
    ExplicitInjection,
    ForwardRef,
    InstanceLevelInjectionMethods,
    Logger,
    NoConstructor,
    Repository,
    StaticInjection,
    Subclass,
    UserId,
    Variadic,
    WithInjection,
)
from servicemock.analyzer.reflection import (
    MISSING,
    ClassReflection,
    TypeDeclaration,
    normalize_identifier,
    qualified_name,
    resolve_class,
)
from servicemock.config.models import ServiceMockConfig
from servicemock.errors import InvalidClassError, UnknownMethodError


# =============================================================================
# Class resolution
# =============================================================================


class TestResolveClass:
    """Test resolving class identifiers."""

    def test_class_object_is_returned_as_is(self):
        assert resolve_class(ClassX) is ClassX

    @pytest.mark.parametrize(
        "identifier",
        ["sample_services.ClassX", "sample_services:ClassX"],
    )
    def test_importable_names(self, identifier):
        assert resolve_class(identifier) is ClassX

    @pytest.mark.parametrize(
        "identifier",
        [
            "sample_services.DoesNotExist",
            "no_such_module_anywhere.Thing",
            "no_such_module_anywhere:Thing",
            "sample_services:T",
            "",
        ],
    )
    def test_invalid_names(self, identifier):
        with pytest.raises(InvalidClassError):
            resolve_class(identifier)

    def test_invalid_name_chains_underlying_error(self):
        with pytest.raises(InvalidClassError) as exc_info:
            resolve_class("sample_services.DoesNotExist")

        assert isinstance(exc_info.value.__cause__, AttributeError)
        assert "fully qualified class name" in str(exc_info.value)

    def test_non_string_identifier(self):
        with pytest.raises(InvalidClassError):
            resolve_class(42)

    def test_qualified_names(self):
        assert qualified_name(ClassX) == "sample_services.ClassX"
        assert normalize_identifier(ClassX) == "sample_services.ClassX"
        assert normalize_identifier("sample_services:ClassX") == "sample_services.ClassX"

    def test_generic_alias_normalizes_to_origin(self):
        assert normalize_identifier(Box[int]) == "sample_services.Box"

    def test_non_class_identifier_normalizes_to_repr(self):
        assert normalize_identifier(42) == "42"
        assert normalize_identifier(Optional[Logger]) == repr(Optional[Logger])


# =============================================================================
# Type declarations
# =============================================================================


class TestTypeDeclaration:
    """Test classification of parameter annotations."""

    def test_single_class(self):
        declaration = TypeDeclaration.from_annotation(Logger)

        assert not declaration.is_union
        assert not declaration.is_builtin()
        assert declaration.python_type is Logger
        assert declaration.name == "sample_services.Logger"

    @pytest.mark.parametrize("annotation", [Optional[Logger], Logger | None])
    def test_optional_is_a_single_type(self, annotation):
        declaration = TypeDeclaration.from_annotation(annotation)

        assert not declaration.is_union
        assert declaration.python_type is Logger

    def test_union_of_two_classes(self):
        declaration = TypeDeclaration.from_annotation(Logger | Repository)

        assert declaration.is_union
        assert declaration.members == (Logger, Repository)
        with pytest.raises(TypeError):
            declaration.python_type

    @pytest.mark.parametrize(
        "annotation",
        [int, str, bool, bytes, list, dict[str, int], list[str], object, None, type(None),
         Any, Literal["a"], UserId],
    )
    def test_builtins(self, annotation):
        assert TypeDeclaration.from_annotation(annotation).is_builtin()

    def test_callable_is_builtin(self):
        from typing import Callable

        assert TypeDeclaration.from_annotation(Callable[[str], None]).is_builtin()
        assert TypeDeclaration.from_annotation(Callable).is_builtin()

    def test_generic_user_class_resolves_to_origin(self):
        declaration = TypeDeclaration.from_annotation(Box[int])

        assert not declaration.is_builtin()
        assert declaration.python_type is Box

    def test_configured_builtin(self):
        config = ServiceMockConfig(builtin_types=["sample_services.Logger"])

        assert TypeDeclaration.from_annotation(Logger).is_builtin(config)
        assert not TypeDeclaration.from_annotation(Repository).is_builtin(config)


# =============================================================================
# Methods and parameters
# =============================================================================


class TestClassReflection:
    """Test constructor and method discovery."""

    def test_constructor_parameters(self):
        init = ClassReflection(ClassX).constructor()
        params = init.parameters()

        assert [p.name for p in params] == ["log", "name"]
        assert params[0].annotation is Logger
        assert not params[0].has_default
        assert params[1].annotation is str
        assert params[1].default == "x"

    def test_no_constructor(self):
        assert ClassReflection(NoConstructor).constructor() is None

    def test_inherited_constructor(self):
        init = ClassReflection(Subclass).constructor()

        assert init is not None
        assert init.owner is Subclass
        assert [p.name for p in init.parameters()] == ["log", "name"]
        assert str(init) == "sample_services.Subclass.__init__"

    def test_unresolvable_forward_reference_is_missing(self):
        params = ClassReflection(ForwardRef).constructor().parameters()

        assert params[0].annotation is MISSING
        assert not params[0].has_type

    def test_postponed_annotations_are_evaluated_one_by_one(self):
        params = ClassReflection(UsesTypeChecking).constructor().parameters()

        assert [p.name for p in params] == ["log", "name", "gadget"]
        assert params[0].annotation is Logger
        assert params[1].annotation is str
        assert params[2].annotation is MISSING

    def test_postponed_return_annotations(self):
        reflection = ClassReflection(UsesTypeChecking)

        assert reflection.method("repository").return_annotation() is Repository
        assert reflection.method("gadget_for").return_annotation() is MISSING
        assert reflection.method("gadget_for").parameters()[0].annotation is str

    def test_variadic_parameters(self):
        params = ClassReflection(Variadic).constructor().parameters()

        assert [p.kind for p in params] == [
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ]
        assert [p.is_variadic for p in params] == [False, True, True]

    def test_public_methods_skip_private(self):
        names = [m.name for m in ClassReflection(ClassY).public_methods()]

        assert "fetch" in names
        assert "describe" in names
        assert "_load" not in names
        assert "__init__" not in names

    def test_method_lookup(self):
        reflection = ClassReflection(ClassY)

        assert reflection.method("_load").return_annotation() is list
        with pytest.raises(UnknownMethodError):
            reflection.method("nope")

    def test_marked_injection_methods(self):
        names = [m.name for m in ClassReflection(WithInjection).injection_methods()]

        assert names == ["set_logger", "set_clock"]

    def test_explicit_injection_methods_win(self):
        names = [m.name for m in ClassReflection(ExplicitInjection).injection_methods()]

        assert names == ["attach"]

    def test_static_injection_methods(self):
        reflection = ClassReflection(StaticInjection)

        assert reflection.declares_injection_methods()
        assert [m.name for m in reflection.injection_methods()] == ["set_clock"]

    def test_instance_level_injection_methods_fall_back_to_markers(self):
        reflection = ClassReflection(InstanceLevelInjectionMethods)

        assert not reflection.declares_injection_methods()
        assert [m.name for m in reflection.injection_methods()] == ["set_logger"]

    def test_for_identifier(self):
        reflection = ClassReflection.for_identifier("sample_services:ClassY")

        assert reflection.cls is sample_services.ClassY
        assert reflection.name == "sample_services.ClassY"
