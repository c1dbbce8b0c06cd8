"""Parse variable bindings typed by a user, e.g. "A 2 B 3" or "A=2 B=-3"."""
import re
from typing import Dict, Iterable, List

from infix_postfix.common.errors import InvalidBindings


_NAME_RE = re.compile(r"^[A-Za-z0-9]+$")
_VALUE_RE = re.compile(r"^[+-]?[0-9]+$")


def _parse_value(name: str, raw: str) -> int:
    if not _NAME_RE.match(name):
        raise InvalidBindings(f"Invalid variable name: {name!r}")
    if not _VALUE_RE.match(raw):
        raise InvalidBindings(f"Invalid integer value for {name}: {raw!r}")
    return int(raw)


def parse_binding_args(args: Iterable[str]) -> Dict[str, int]:
    """
    Build a bindings mapping from already split words.

    Each binding is either a single "NAME=VALUE" word or two words "NAME VALUE".
    A later binding for the same name replaces an earlier one.

    :param Iterable[str] args: Words to parse

    :return: Variable name to integer value
    :rtype: Dict[str, int]
    :raises InvalidBindings: If a name or value is malformed or a value is missing
    """
    words: List[str] = list(args)
    bindings: Dict[str, int] = {}
    i = 0
    while i < len(words):
        word = words[i]
        if "=" in word:
            name, _, raw = word.partition("=")
            i += 1
        else:
            if i + 1 >= len(words):
                raise InvalidBindings(f"Missing value for variable: {word!r}")
            name, raw = word, words[i + 1]
            i += 2
        bindings[name] = _parse_value(name, raw)
    return bindings


def parse_bindings(text: str) -> Dict[str, int]:
    """
    Parse whitespace-separated binding text.

    :param str text: Text such as "A 2 B 3" or "A=2 B=3"

    :return: Variable name to integer value
    :rtype: Dict[str, int]
    :raises InvalidBindings: If the text is malformed
    """
    return parse_binding_args(text.split())
