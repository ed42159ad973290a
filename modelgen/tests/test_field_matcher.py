"""
Tests for name-based field correspondence.
"""

from __future__ import annotations

from apimodels import account, blog, user
from modelgen.pipeline import FieldMatcher, MappingConfig


class TestMatchFields:
    """Test cases for FieldMatcher.match_fields"""

    def test_zero_config_target_matches_every_field(self, introspector):
        source = introspector.read(blog.Blog)
        target = MappingConfig.create(source).target_type

        matches = FieldMatcher().match_fields(source, target)

        assert matches == {name: name for name in source.field_names}

    def test_renamed_and_omitted_fields_do_not_match(self, introspector):
        source = introspector.read(account.Account)
        target = MappingConfig.create(source, omit_fields=["legacy_field"], field_map={"ID": "external_id"}).target_type

        matches = FieldMatcher().match_fields(source, target)

        assert matches == {"name": "name", "balance": "balance"}

    def test_no_common_fields(self, introspector):
        matches = FieldMatcher().match_fields(introspector.read(user.User), introspector.read(blog.Post))

        assert matches == {}


class TestNeedsRecursiveMapping:
    """Test cases for FieldMatcher.needs_recursive_mapping"""

    def test_both_nested(self, introspector):
        source = introspector.read(blog.Blog)
        target = MappingConfig.create(source).target_type
        matcher = FieldMatcher()

        for name in ("author", "editor", "posts", "drafts"):
            assert matcher.needs_recursive_mapping(source.get_field(name), target.get_field(name))

    def test_primitive_enum_and_opaque_fields(self, introspector):
        source = introspector.read(blog.Post)
        target = MappingConfig.create(source).target_type
        matcher = FieldMatcher()

        for name in ("title", "tags", "colors", "published_at"):
            assert not matcher.needs_recursive_mapping(source.get_field(name), target.get_field(name))

    def test_only_one_side_nested(self, introspector):
        blog_info = introspector.read(blog.Blog)

        assert not FieldMatcher().needs_recursive_mapping(blog_info.get_field("author"), blog_info.get_field("title"))
