# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Terraform module loader for the JSON configuration syntax.

Reads every ``*.tf.json`` file in a module directory and collects
``resource`` and ``variable`` declarations, then resolves variable values
from ``terraform.tfvars.json``, ``*.auto.tfvars.json`` and any explicitly
supplied variable files.

Values are decoded with :mod:`json`; source positions come from composing
the same text with PyYAML (JSON is a subset of the YAML flow syntax), so
every attribute carries an exact line/column range for diagnostics.
"""

import bisect
import json
import logging
import re
from pathlib import Path
from typing import Any

import yaml

from ..config.constants import OktaRulesetConstants
from .exceptions import ModuleLoadError
from .models import Attribute, Expression, Module, ResourceDecl, SourcePos, SourceRange

logger = logging.getLogger(__name__)

# Property name Terraform reserves for comments in JSON bodies
_COMMENT_KEY = "//"

# Characters valid in a JSON document that PyYAML either rejects (DEL, C1
# controls, U+FFFE/U+FFFF) or treats as line breaks (NEL, U+2028, U+2029),
# plus tabs, which it rejects as indentation. Outside strings JSON only
# allows the tab, so swapping each for a space keeps lines and columns.
_YAML_UNSAFE_RE = re.compile("[\t\x7f-\x9f\u2028\u2029\ufffe\uffff]")


class _SourceFile:
    """Text of one file plus helpers to turn YAML marks into source ranges."""

    def __init__(self, filename: str, text: str):
        self.filename = filename
        self.text = text
        # Character and UTF-8 byte offset of the start of every line
        self._line_chars = [0]
        self._line_bytes = [0]
        for line in text.splitlines(keepends=True):
            self._line_chars.append(self._line_chars[-1] + len(line))
            self._line_bytes.append(self._line_bytes[-1] + len(line.encode("utf-8")))

    def byte_offset(self, index: int) -> int:
        """UTF-8 byte offset of character *index*."""
        i = bisect.bisect_right(self._line_chars, index) - 1
        start = self._line_chars[i]
        return self._line_bytes[i] + len(self.text[start:index].encode("utf-8"))

    def pos(self, mark: yaml.Mark) -> SourcePos:
        return SourcePos(line=mark.line + 1, column=mark.column + 1, byte=self.byte_offset(mark.index))

    def range(self, start: yaml.Node, end: yaml.Node | None = None) -> SourceRange:
        end = end or start
        return SourceRange(filename=self.filename, start=self.pos(start.start_mark), end=self.pos(end.end_mark))


class ModuleLoader:
    """Loads Terraform modules written in the JSON configuration syntax."""

    CONFIG_SUFFIX = ".tf.json"
    NATIVE_SUFFIX = ".tf"
    DEFAULT_TFVARS = "terraform.tfvars.json"
    AUTO_TFVARS_SUFFIX = ".auto.tfvars.json"

    def __init__(self, max_file_size_mb: int = OktaRulesetConstants.DEFAULT_MAX_FILE_SIZE_MB):
        """
        Initialize module loader.

        Args:
            max_file_size_mb: Maximum configuration file size to read in MB
        """
        self.max_file_size_bytes = max_file_size_mb * 1024 * 1024

    def is_module_directory(self, directory: Path) -> bool:
        """Check whether *directory* contains at least one ``*.tf.json`` file."""
        return directory.is_dir() and any(
            p.is_file() and p.name.endswith(self.CONFIG_SUFFIX) for p in directory.iterdir()
        )

    def load_module(
        self,
        module_directory: str | Path,
        var_files: list[str | Path] | None = None,
        variables: dict[str, Any] | None = None,
    ) -> Module:
        """
        Load a module from a directory.

        Args:
            module_directory: Path to the module directory
            var_files: Extra ``*.tfvars.json`` files, applied in order after
                the automatically loaded ones
            variables: Explicit variable values, highest precedence

        Returns:
            Parsed Module object

        Raises:
            ModuleLoadError: If the module cannot be loaded
        """
        if not isinstance(module_directory, Path):
            module_directory = Path(module_directory)

        if not module_directory.exists():
            raise ModuleLoadError(f"Module directory does not exist: {module_directory}")

        if not module_directory.is_dir():
            raise ModuleLoadError(f"Path is not a directory: {module_directory}")

        entries = sorted(p for p in module_directory.iterdir() if p.is_file())
        config_files = [p for p in entries if p.name.endswith(self.CONFIG_SUFFIX)]
        native_files = [p for p in entries if p.suffix == self.NATIVE_SUFFIX]
        if native_files:
            logger.warning(
                "Skipping %d native-syntax .tf file(s) in %s; only the JSON syntax (.tf.json) is supported",
                len(native_files),
                module_directory,
            )

        module = Module(directory=str(module_directory))
        for config_file in config_files:
            self._load_config_file(config_file, module)

        values: dict[str, Any] = dict(module.variable_defaults)
        default_tfvars = module_directory / self.DEFAULT_TFVARS
        if default_tfvars.is_file():
            values.update(self.load_var_file(default_tfvars))
        for auto_file in entries:
            if auto_file.name.endswith(self.AUTO_TFVARS_SUFFIX):
                values.update(self.load_var_file(auto_file))
        for var_file in var_files or []:
            values.update(self.load_var_file(var_file))
        if variables:
            values.update(variables)
        module.variable_values = values

        logger.debug(
            "Loaded module %s: %d file(s), %d resource(s), %d variable value(s)",
            module_directory,
            len(module.files),
            len(module.resources),
            len(values),
        )
        return module

    def load_var_file(self, path: str | Path) -> dict[str, Any]:
        """Load a ``*.tfvars.json`` file into a name → value mapping."""
        path = Path(path)
        if not path.is_file():
            raise ModuleLoadError(f"Variable file not found: {path}")
        raw, _, _ = self._parse_file(path, with_nodes=False)
        if not isinstance(raw, dict):
            raise ModuleLoadError(f"{path}: variable file must contain a JSON object")
        return raw

    # -----------------------------------------------------------------------
    # Internal parsing
    # -----------------------------------------------------------------------

    def _parse_file(self, path: Path, with_nodes: bool = True) -> tuple[Any, _SourceFile | None, yaml.Node | None]:
        try:
            size = path.stat().st_size
        except OSError as e:
            raise ModuleLoadError(f"Failed to stat {path}: {e}") from e
        if size > self.max_file_size_bytes:
            raise ModuleLoadError(f"{path}: file exceeds {self.max_file_size_bytes} bytes")

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ModuleLoadError(f"Failed to read {path}: {e}") from e

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ModuleLoadError(f"{path}: invalid JSON: {e}") from e

        if not with_nodes:
            return raw, None, None

        try:
            node = yaml.compose(_YAML_UNSAFE_RE.sub(" ", text), Loader=yaml.SafeLoader)
        except yaml.YAMLError as e:
            raise ModuleLoadError(f"{path}: failed to locate source positions: {e}") from e

        return raw, _SourceFile(str(path), text), node

    def _load_config_file(self, path: Path, module: Module) -> None:
        raw, source, root = self._parse_file(path)
        module.files.append(str(path))

        if root is None or (isinstance(raw, dict) and not raw):
            return
        if not isinstance(root, yaml.MappingNode) or not isinstance(raw, dict):
            raise ModuleLoadError(f"{path}: top-level value must be a JSON object")

        for key, _key_node, value_node, value in self._items(root, raw):
            if key == "resource":
                self._load_resources(value_node, value, source, module)
            elif key == "variable":
                self._load_variables(value_node, value, source, module)

    def _load_resources(self, node: yaml.Node, raw: Any, source: _SourceFile, module: Module) -> None:
        for type_node, type_raw in self._objects(node, raw, source):
            for rtype, _, names_node, names_raw in self._items(type_node, type_raw):
                for name_obj_node, name_obj_raw in self._objects(names_node, names_raw, source):
                    for rname, name_key, body_node, body_raw in self._items(name_obj_node, name_obj_raw):
                        module.resources.append(
                            ResourceDecl(
                                type=rtype,
                                name=rname,
                                attributes=self._attributes(body_node, body_raw, source),
                                def_range=source.range(name_key),
                            )
                        )

    def _load_variables(self, node: yaml.Node, raw: Any, source: _SourceFile, module: Module) -> None:
        for var_obj_node, var_obj_raw in self._objects(node, raw, source):
            for vname, _, body_node, body_raw in self._items(var_obj_node, var_obj_raw):
                if not isinstance(body_raw, dict):
                    raise ModuleLoadError(f"{source.range(body_node)}: variable '{vname}' must be a JSON object")
                if "default" in body_raw:
                    module.variable_defaults[vname] = body_raw["default"]

    def _attributes(self, node: yaml.Node, raw: Any, source: _SourceFile) -> dict[str, Attribute]:
        if not isinstance(node, yaml.MappingNode) or not isinstance(raw, dict):
            raise ModuleLoadError(f"{source.range(node)}: resource body must be a JSON object")
        attributes: dict[str, Attribute] = {}
        for name, key_node, value_node, value in self._items(node, raw):
            if name == _COMMENT_KEY:
                continue
            attributes[name] = Attribute(
                name=name,
                expr=Expression(value=value, range=source.range(value_node)),
                range=source.range(key_node, value_node),
            )
        return attributes

    @staticmethod
    def _items(node: yaml.MappingNode, raw: dict) -> list[tuple[str, yaml.Node, yaml.Node, Any]]:
        """Pair mapping node entries with their decoded values (last duplicate wins)."""
        entries: dict[str, tuple[yaml.Node, yaml.Node]] = {}
        for key_node, value_node in node.value:
            entries[key_node.value] = (key_node, value_node)
        return [(key, k, v, raw[key]) for key, (k, v) in entries.items()]

    def _objects(self, node: yaml.Node, raw: Any, source: _SourceFile) -> list[tuple[yaml.MappingNode, dict]]:
        """Return the object(s) at *node*; Terraform allows an array of objects at any label level."""
        if isinstance(node, yaml.MappingNode) and isinstance(raw, dict):
            return [(node, raw)]
        if isinstance(node, yaml.SequenceNode) and isinstance(raw, list):
            objects: list[tuple[yaml.MappingNode, dict]] = []
            for item_node, item_raw in zip(node.value, raw):
                if not isinstance(item_node, yaml.MappingNode) or not isinstance(item_raw, dict):
                    raise ModuleLoadError(f"{source.range(item_node)}: expected a JSON object")
                objects.append((item_node, item_raw))
            return objects
        raise ModuleLoadError(f"{source.range(node)}: expected a JSON object or array of objects")
