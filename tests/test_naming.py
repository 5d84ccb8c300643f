"""Tests for identifier transforms."""

import pytest

from schema_typegen.schema.naming import (
    IdentifierRole,
    NamingPolicy,
    RuntimeEnumsStyle,
    quote_member,
    singularize,
    split_words,
    to_camel_case,
    to_pascal_case,
    to_screaming_snake_case,
    transform,
)


class TestCaseConversion:
    """Test word splitting and case conversion."""

    def test_split_words(self):
        assert split_words("user_id") == ["user", "id"]
        assert split_words("createdAt") == ["created", "At"]
        assert split_words("HTTPServer") == ["HTTP", "Server"]
        assert split_words("address2_line") == ["address2", "line"]

    def test_camel_case(self):
        assert to_camel_case("user_id") == "userId"
        assert to_camel_case("CREATED_AT") == "createdAt"
        assert to_camel_case("already") == "already"

    def test_pascal_case(self):
        assert to_pascal_case("order_items") == "OrderItems"
        assert to_pascal_case("CONFIRMED") == "Confirmed"
        assert to_pascal_case("in-progress") == "InProgress"

    def test_screaming_snake_case(self):
        assert to_screaming_snake_case("inProgress") == "IN_PROGRESS"
        assert to_screaming_snake_case("on hold") == "ON_HOLD"


class TestSingularize:
    """Test singularization of table names."""

    @pytest.mark.parametrize("plural,singular", [
        ("users", "user"),
        ("categories", "category"),
        ("addresses", "address"),
        ("boxes", "box"),
        ("branches", "branch"),
        ("statuses", "status"),
        ("people", "person"),
        ("children", "child"),
        ("user_accounts", "user_account"),
        ("UserAccounts", "UserAccount"),
    ])
    def test_plural_forms(self, plural, singular):
        assert singularize(plural) == singular

    @pytest.mark.parametrize("name", ["data", "series", "status", "analysis", "news", "address", "user"])
    def test_unchanged(self, name):
        """Uncountable, already-singular and ambiguous names pass through."""
        assert singularize(name) == name

    def test_preserves_case(self):
        assert singularize("USERS") == "USER"
        assert singularize("People") == "Person"


class TestTransform:
    """Test role-specific transforms under a naming policy."""

    def test_type_is_always_pascal_case(self):
        assert transform("order_items", NamingPolicy(), IdentifierRole.TYPE) == "OrderItems"

    def test_singular_applies_to_types_only(self):
        policy = NamingPolicy(singular=True)
        assert transform("users", policy, IdentifierRole.TYPE) == "User"
        assert transform("users", policy, IdentifierRole.TABLE_KEY) == "users"
        assert transform("items", policy, IdentifierRole.MEMBER) == "items"

    def test_camel_case_members(self):
        policy = NamingPolicy(camel_case=True)
        assert transform("user_id", policy, IdentifierRole.MEMBER) == "userId"
        assert transform("user_id", NamingPolicy(), IdentifierRole.MEMBER) == "user_id"

    def test_camel_case_table_keys_per_segment(self):
        policy = NamingPolicy(camel_case=True)
        assert transform("audit_log.user_events", policy, IdentifierRole.TABLE_KEY) == "auditLog.userEvents"

    def test_enum_member_styles(self):
        pascal = NamingPolicy(runtime_enums_style=RuntimeEnumsStyle.PASCAL_CASE)
        screaming = NamingPolicy(runtime_enums_style=RuntimeEnumsStyle.SCREAMING_SNAKE_CASE)
        assert transform("in_progress", pascal, IdentifierRole.ENUM_MEMBER) == "InProgress"
        assert transform("in_progress", screaming, IdentifierRole.ENUM_MEMBER) == "IN_PROGRESS"

    def test_type_names_never_start_with_digit(self):
        assert transform("2fa_codes", NamingPolicy(), IdentifierRole.TYPE) == "_2FaCodes"

    def test_quote_member(self):
        assert quote_member("userId") == "userId"
        assert quote_member("$meta") == "$meta"
        assert quote_member("first name") == '"first name"'
        assert quote_member("cli.users") == '"cli.users"'
        assert quote_member("straßeNummer") == "straßeNummer"


class TestNonAsciiIdentifiers:
    """Test that letters outside ASCII survive every transform."""

    def test_split_words(self):
        assert split_words("über_name") == ["über", "name"]
        assert split_words("straße_nummer") == ["straße", "nummer"]
        assert split_words("ÜberName") == ["Über", "Name"]

    def test_camel_case_members(self):
        policy = NamingPolicy(camel_case=True)
        assert transform("über_name", policy, IdentifierRole.MEMBER) == "überName"
        assert transform("straße_nummer", policy, IdentifierRole.MEMBER) == "straßeNummer"
        assert transform("ñandú", policy, IdentifierRole.MEMBER) == "ñandú"

    def test_type_names(self):
        assert transform("ñandú", NamingPolicy(), IdentifierRole.TYPE) == "Ñandú"
        assert transform("bücher", NamingPolicy(singular=True), IdentifierRole.TYPE) == "Bücher"
        assert transform("straßen_namen", NamingPolicy(), IdentifierRole.TYPE) == "StraßenNamen"

    def test_enum_member_name(self):
        policy = NamingPolicy(runtime_enums_style=RuntimeEnumsStyle.PASCAL_CASE)
        assert transform("größe_klein", policy, IdentifierRole.ENUM_MEMBER) == "GrößeKlein"
        assert transform("café", policy, IdentifierRole.ENUM_MEMBER) == "Café"
