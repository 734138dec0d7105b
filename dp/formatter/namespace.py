"""
Import path helpers.

An import path such as "example.org/Foo-Bar/baz" provides the
namespaces ::example_org::foo_bar::baz, example_org::foo_bar::baz,
foo_bar::baz and baz. Unqualified import names are resolved against
these.

xwest
"""

from typing import List, Tuple


def unquote_import_path(path: str) -> Tuple[str, bool]:
    """
    Strip the quotes of an import path.

    Escapes are not interpreted: the path is cut at the first backslash
    and the second result is False in that case.
    """
    if not (len(path) >= 2 and path.startswith('"') and path.endswith('"')):
        raise ValueError(f"import path is not quoted: {path}")

    path = path[1:-1]
    i = path.find("\\")
    if i >= 0:
        return path[:i], False
    return path, True


def import_path_namespaces(path: str) -> List[str]:
    """List the namespaces an unquoted import path provides, longest first."""
    if path.startswith("/") or path.endswith("/") or "//" in path:
        return []

    path = path.lower().replace("-", "_").replace(".", "_")

    names = [""] + path.split("/")  # For the :: prefix
    return ["::".join(names[i:]) for i in range(len(names))]


def import_path_group(path: str) -> int:
    """
    Sort bucket of an import path.

    1: ordinary paths, 2: paths whose first element contains a dot,
    3: paths under internal/.
    """
    if len(path) >= 2 and path.startswith('"'):
        path, _ = unquote_import_path(path)

    if path.split("/", 1)[0] == "internal":
        return 3

    i = path.find(".")
    if i >= 0 and "/" not in path[:i]:
        return 2

    return 1
