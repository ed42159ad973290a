"""
Tests for structure introspection and field classification.
"""

from __future__ import annotations

import pytest

from apimodels import blog, catalog, invalid, user
from modelgen.pipeline import DiscoveryError, Introspector, ModelGenerator, TypeKind


class TestIntrospectLiveClasses:
    """Introspection of importable classes"""

    def test_flat_structure(self, introspector):
        info = introspector.read(user.User)

        assert info.type_name == "User"
        assert info.qualified_namespace == "user"
        assert info.namespace_path == "apimodels.user"
        assert info.qualified_name == "user.User"
        assert info.field_names == ["id", "name", "email"]
        for f in info.fields:
            assert not f.is_pointer
            assert not f.is_sequence
            assert not f.is_nested

    def test_instance_is_accepted(self, introspector):
        assert introspector.read(user.User(id=1)).type_name == "User"

    def test_read_path_forms(self, introspector):
        assert introspector.read_path("apimodels.user:User").field_names == ["id", "name", "email"]
        assert introspector.read_path("apimodels.user.User").type_name == "User"

    def test_nested_classification(self, introspector):
        info = introspector.read(blog.Blog)

        author = info.get_field("author")
        assert author.is_nested and not author.is_pointer and not author.is_sequence
        assert author.type_expr == "blog.Author"

        editor = info.get_field("editor")
        assert editor.is_nested and editor.is_pointer and not editor.is_sequence
        assert editor.type_expr == "blog.Author | None"

        posts = info.get_field("posts")
        assert posts.is_nested and posts.is_pointer and posts.is_sequence
        assert posts.type_expr == "list[blog.Post] | None"
        assert posts.element_ref.render() == "blog.Post"

        drafts = info.get_field("drafts")
        assert drafts.is_nested and drafts.is_sequence and not drafts.is_pointer
        assert drafts.element_ref.is_nullable

    def test_enum_is_not_nested(self, introspector):
        theme = introspector.read(blog.Blog).get_field("theme")

        assert theme.type_ref.kind == TypeKind.ENUM
        assert not theme.is_nested
        assert theme.type_expr == "blog.Color"

    def test_opaque_types_are_never_nested(self, introspector):
        info = introspector.read(catalog.Product)

        for name in ("id", "created_at", "price"):
            f = info.get_field(name)
            assert f.type_ref.kind == TypeKind.OPAQUE
            assert not f.is_nested

        available_on = info.get_field("available_on")
        assert available_on.is_pointer
        assert available_on.type_expr == "datetime.date | None"

    def test_typing_aliases(self, introspector):
        info = introspector.read(catalog.Product)

        sizes = info.get_field("sizes")
        assert sizes.is_sequence
        assert sizes.type_expr == "list[int]"

        attributes = info.get_field("attributes")
        assert attributes.type_ref.kind == TypeKind.DICT
        assert attributes.type_expr == "dict[str, str]"

    def test_base_class_fields_come_first_and_classvars_are_skipped(self, introspector):
        info = introspector.read(catalog.Product)

        assert info.field_names[:2] == ["id", "created_at"]
        assert "kind" not in info.field_names

    def test_structure_is_cached(self, introspector):
        assert introspector.read(blog.Author) is introspector.read_path("apimodels.blog:Author")


class TestIntrospectSource:
    """Introspection from source text"""

    def test_optional_and_union_spellings(self, introspector):
        source = """
from typing import Optional, Union
import dataclasses

@dataclasses.dataclass
class Item:
    a: Optional[int] = None
    b: Union[str, None] = None
    c: "Item | None" = None
"""
        info = introspector.read_source(source, "Item", "shop.items")

        assert [f.type_expr for f in info.fields] == ["int | None", "str | None", "items.Item | None"]
        assert info.get_field("c").is_nested

    def test_custom_source_loader(self):
        sources = {"remote.api": "from dataclasses import dataclass\n\n@dataclass\nclass Remote:\n    value: int\n"}
        introspector = Introspector(source_loader=sources.__getitem__)

        info = introspector.read_path("remote.api:Remote")

        assert info.qualified_name == "api.Remote"
        assert info.field_names == ["value"]

    def test_nested_sequence_of_primitives(self, introspector):
        source = "import dataclasses\n\n@dataclasses.dataclass(frozen=True)\nclass Grid:\n    cells: list[list[int]]\n"
        info = introspector.read_source(source, "Grid", "geo")

        cells = info.get_field("cells")
        assert cells.is_sequence and not cells.is_nested
        assert cells.type_expr == "list[list[int]]"


class TestDiscoveryErrors:
    """Structures that cannot be classified deterministically"""

    def test_unknown_struct(self, introspector):
        with pytest.raises(DiscoveryError, match="struct Missing not found"):
            introspector.read_path("apimodels.user:Missing")

    def test_unknown_module(self, introspector):
        with pytest.raises(DiscoveryError, match="Cannot import module"):
            introspector.read_path("apimodels.does_not_exist:User")

    def test_invalid_reference(self, introspector):
        with pytest.raises(DiscoveryError, match="Invalid type reference"):
            introspector.read_path("User")

    def test_union_types_are_rejected(self, introspector):
        with pytest.raises(DiscoveryError, match="union types are not supported"):
            introspector.read(invalid.Ambiguous)

    def test_records_from_other_modules_are_rejected(self, introspector):
        with pytest.raises(DiscoveryError, match="Foreign.owner"):
            introspector.read(invalid.Foreign)

    def test_inner_classes_are_rejected(self, introspector):
        with pytest.raises(DiscoveryError, match="not declared at module level"):
            introspector.read(invalid.Outer.Inner)

    def test_enums_are_not_structures(self, introspector):
        with pytest.raises(DiscoveryError, match="is an Enum"):
            introspector.read_path("apimodels.blog:Color")

    @pytest.mark.parametrize(
        "annotation, message",
        [
            ("list", "needs type arguments"),
            ("dict[str, Node]", "records inside mappings"),
            ("list[list[Node]]", "nested sequences of records"),
            ("tuple[int, int]", "unsupported generic"),
            ("typing.Any", "cannot map type"),
        ],
    )
    def test_unsupported_annotations(self, introspector, annotation, message):
        source = (
            "import typing\nfrom dataclasses import dataclass\n\n"
            f"@dataclass\nclass Node:\n    value: int\n\n@dataclass\nclass Tree:\n    field: {annotation}\n"
        )
        with pytest.raises(DiscoveryError, match=message):
            introspector.read_source(source, "Tree", "trees")


class TestDataclassContract:
    """Only dataclasses whose fields are all constructor arguments are structures"""

    def test_plain_class_is_rejected(self, introspector):
        source = "class Plain:\n    value: int = 0\n"
        with pytest.raises(DiscoveryError, match="shop.Plain is not a dataclass"):
            introspector.read_source(source, "Plain", "shop")

    def test_dataclass_without_init_is_rejected(self, introspector):
        source = "from dataclasses import dataclass\n\n@dataclass(init=False)\nclass Manual:\n    value: int = 0\n"
        with pytest.raises(DiscoveryError, match="without a generated __init__"):
            introspector.read_source(source, "Manual", "shop")

    def test_field_excluded_from_init_is_rejected(self, introspector):
        source = """
from dataclasses import dataclass, field

@dataclass
class Order:
    total: int = 0
    cache: dict[str, int] = field(init=False, default_factory=dict)
"""
        with pytest.raises(DiscoveryError, match="shop.Order.cache: fields with init=False"):
            introspector.read_source(source, "Order", "shop")

    def test_nested_plain_class_is_rejected(self, generator_config):
        source = """
from dataclasses import dataclass

class Address:
    street: str = ""

@dataclass
class Customer:
    address: Address
"""
        introspector = Introspector(source_loader={"shop": source}.__getitem__)
        generator = ModelGenerator(generator_config, introspector=introspector).map("shop:Customer")

        with pytest.raises(DiscoveryError, match="shop.Address is not a dataclass"):
            generator.generate()

    def test_plain_base_class_annotations_are_not_fields(self, introspector):
        source = """
from dataclasses import dataclass

class Tagged:
    tag: str

@dataclass
class Order(Tagged):
    total: int = 0
"""
        info = introspector.read_source(source, "Order", "shop")

        assert info.field_names == ["total"]
