"""Override payload normalization.

Converts YAML (and therefore JSON) text into canonical minified JSON.
YAML has many spellings of the same value (quoting, folded scalars, key
order), so the minified JSON form is what gets compared and stored.
"""

from __future__ import annotations

import json
import re
from typing import Any

import yaml

from release_reconciler.integrations.helm.exceptions import NormalizationError


class SafeLoader(yaml.SafeLoader):
    """Safe loader that keeps scalars the way JSON would see them.

    Timestamps and the bare ``=`` value tag stay strings, and JSON-style
    exponent floats (``1e+20``) resolve as floats so that normalized
    output loads back to the same value. Mapping keys become strings as
    the mapping is built, so ``1`` and ``true`` stay distinct keys.
    """

    @staticmethod
    def construct_scalar_string(loader: yaml.SafeLoader, node: yaml.Node) -> str:
        return loader.construct_scalar(node)  # type: ignore[arg-type, return-value]

    def construct_mapping(  # type: ignore[override]
        self, node: yaml.MappingNode, deep: bool = False
    ) -> dict[str, Any]:
        self.flatten_mapping(node)
        mapping: dict[str, Any] = {}
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=deep)  # type: ignore[no-untyped-call]
            mapping[_key_to_str(key)] = self.construct_object(  # type: ignore[no-untyped-call]
                value_node, deep=deep
            )
        return mapping


SafeLoader.add_constructor("tag:yaml.org,2002:value", SafeLoader.construct_scalar_string)
SafeLoader.add_constructor("tag:yaml.org,2002:timestamp", SafeLoader.construct_scalar_string)
SafeLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(r"^[-+]?[0-9]+(?:\.[0-9]*)?[eE][-+]?[0-9]+$"),
    list("-+0123456789"),
)


def _key_to_str(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def normalize_overrides(text: str) -> str:
    """Convert a YAML or JSON payload to canonical minified JSON.

    Args:
        text: YAML or JSON document.

    Returns:
        Minified JSON with sorted keys.

    Raises:
        NormalizationError: If the text is not valid YAML or cannot be
            represented as JSON.
    """
    try:
        data = yaml.load(text, Loader=SafeLoader)  # noqa: S506
    except yaml.YAMLError as e:
        raise NormalizationError(original_error=e) from e

    try:
        return json.dumps(
            data,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise NormalizationError(
            message="Override payload cannot be represented as JSON",
            original_error=e,
        ) from e


def attempt_normalize_overrides(text: str) -> str:
    """Normalize an override payload, falling back to the input verbatim.

    Args:
        text: YAML or JSON document.

    Returns:
        The normalized JSON, or ``text`` unchanged if normalization fails.
    """
    try:
        return normalize_overrides(text)
    except NormalizationError:
        return text
