"""
Utility functions for the model generator.
"""

import re

# Boundaries between a lowercase/digit run and an uppercase letter, or inside acronyms ("HTTPServer")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def pascal_to_snake_case(text: str) -> str:
    """Convert PascalCase or camelCase text to snake_case.

    Examples:
        "BlogPost" -> "blog_post"
        "HTTPServer" -> "http_server"
        "userID" -> "user_id"
        "user" -> "user"
    """
    if not text:
        return ""
    return _CAMEL_BOUNDARY.sub("_", text).lower()


def namespace_import(namespace_path: str) -> tuple[str, str | None]:
    """Split a dotted module path into an import spec binding its last component.

    Examples:
        "apimodels.blog" -> ("apimodels", "blog")   # from apimodels import blog
        "blog" -> ("blog", None)                   # import blog
    """
    package, _, module = namespace_path.rpartition(".")
    if package:
        return package, module
    return module, None
