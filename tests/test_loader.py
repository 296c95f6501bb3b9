# Copyright 2026 Cisco Systems, Inc. and its affiliates
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
Tests for the Terraform JSON module loader.
"""

import json
import logging

import pytest

from okta_ruleset.core.exceptions import ModuleLoadError
from okta_ruleset.core.loader import ModuleLoader


@pytest.fixture
def loader():
    return ModuleLoader()


class TestLoadModule:
    def test_loads_resources_in_declaration_order(self, loader, make_module):
        module_dir = make_module({"b": {"name": "x"}, "a": {"name": "y"}})
        module = loader.load_module(module_dir)

        assert [r.name for r in module.resources] == ["b", "a"]
        assert all(r.type == "okta_group" for r in module.resources)
        assert module.files == [str(module_dir / "main.tf.json")]

    def test_reads_every_config_file_sorted(self, loader, make_module):
        module_dir = make_module(
            {"main_group": {"name": "x"}},
            extra_files={"a_groups.tf.json": {"resource": {"okta_group": {"early": {"name": "y"}}}}},
        )
        module = loader.load_module(module_dir)

        assert [r.name for r in module.resources] == ["early", "main_group"]

    def test_ignores_non_config_files(self, loader, make_module):
        module_dir = make_module({"g": {"name": "x"}}, extra_files={"notes.json": {"resource": {}}})
        module = loader.load_module(module_dir)
        assert len(module.files) == 1

    def test_native_syntax_files_skipped_with_warning(self, loader, make_module, caplog):
        module_dir = make_module({"g": {"name": "x"}}, extra_files={"legacy.tf": 'resource "okta_group" "g" {}'})
        with caplog.at_level(logging.WARNING, logger="okta_ruleset.core.loader"):
            module = loader.load_module(module_dir)

        assert len(module.resources) == 1
        assert "native-syntax" in caplog.text

    def test_array_of_objects_at_each_level(self, loader, make_module):
        module_dir = make_module(
            extra_files={
                "arrays.tf.json": {
                    "resource": [
                        {"okta_group": [{"one": {"name": "a"}}, {"two": {"name": "b"}}]},
                        {"okta_user": {"u": {"login": "x"}}},
                    ]
                }
            }
        )
        module = loader.load_module(module_dir)

        assert [r.address for r in module.resources] == ["okta_group.one", "okta_group.two", "okta_user.u"]

    def test_comment_property_not_an_attribute(self, loader, make_module):
        module_dir = make_module({"g": {"//": "managed by ops", "name": "x"}})
        module = loader.load_module(module_dir)
        assert set(module.resources[0].attributes) == {"name"}

    def test_empty_document(self, loader, make_module):
        module = loader.load_module(make_module())
        assert module.resources == []


class TestSourceRanges:
    def test_attribute_and_expression_ranges(self, loader, make_module):
        module_dir = make_module({"g2": {"name": "admins"}})
        resource = loader.load_module(module_dir).resources[0]
        attr = resource.attributes["name"]

        assert (attr.range.start.line, attr.range.start.column) == (5, 9)
        assert (attr.range.end.line, attr.range.end.column) == (5, 25)
        assert (attr.expr.range.start.line, attr.expr.range.start.column) == (5, 17)
        assert (attr.expr.range.end.line, attr.expr.range.end.column) == (5, 25)

    def test_definition_range_is_resource_name(self, loader, make_module):
        module_dir = make_module({"g2": {"name": "admins"}})
        resource = loader.load_module(module_dir).resources[0]

        assert (resource.def_range.start.line, resource.def_range.start.column) == (4, 7)
        assert (resource.def_range.end.line, resource.def_range.end.column) == (4, 11)

    def test_byte_offsets_count_utf8(self, loader, tmp_path):
        module_dir = tmp_path / "m"
        module_dir.mkdir()
        text = '{"resource": {"okta_group": {"g": {"description": "é", "name": "x"}}}}'
        (module_dir / "main.tf.json").write_text(text, encoding="utf-8")

        attr = loader.load_module(module_dir).resources[0].attributes["name"]

        column_index = text.index('"x"')
        assert attr.expr.range.start.column == column_index + 1
        assert attr.expr.range.start.byte == column_index + 1

    def test_byte_offsets_on_later_lines(self, loader, tmp_path):
        module_dir = tmp_path / "m"
        module_dir.mkdir()
        text = '{"resource": {"okta_group": {"g": {\n"description": "ééé",\n"name": "x"}}}}'
        (module_dir / "main.tf.json").write_text(text, encoding="utf-8")

        attr = loader.load_module(module_dir).resources[0].attributes["name"]

        assert (attr.expr.range.start.line, attr.expr.range.start.column) == (3, 9)
        assert attr.expr.range.start.byte == len(text[: text.index('"x"')].encode("utf-8"))

    @pytest.mark.parametrize("char", ["\x7f", "\x85", "\x9f", "\u2028", "\ufffe"])
    def test_raw_characters_yaml_cannot_read(self, loader, tmp_path, char):
        module_dir = tmp_path / "m"
        module_dir.mkdir()
        doc = {"resource": {"okta_group": {"g": {"description": f"a{char}b", "name": "admins"}}}}
        (module_dir / "main.tf.json").write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")

        resource = loader.load_module(module_dir).resources[0]

        assert resource.attributes["description"].expr.value == f"a{char}b"
        name = resource.attributes["name"]
        assert (name.range.start.line, name.range.start.column) == (6, 9)
        assert (name.expr.range.start.line, name.expr.range.start.column) == (6, 17)

    def test_tab_indentation(self, loader, tmp_path):
        module_dir = tmp_path / "m"
        module_dir.mkdir()
        text = '{\n\t"resource": {\n\t\t"okta_group": {\n\t\t\t"g": {\n\t\t\t\t"name": "x"\n\t\t\t}\n\t\t}\n\t}\n}\n'
        (module_dir / "main.tf.json").write_text(text, encoding="utf-8")

        attr = loader.load_module(module_dir).resources[0].attributes["name"]
        assert (attr.range.start.line, attr.range.start.column) == (5, 5)


class TestVariables:
    def test_defaults_collected(self, loader, make_module):
        module_dir = make_module(variables={"team": {"default": "terraform"}, "unset": {"type": "string"}})
        module = loader.load_module(module_dir)

        assert module.variable_defaults == {"team": "terraform"}
        assert module.variable_values == {"team": "terraform"}

    def test_precedence(self, loader, make_module, tmp_path):
        extra = tmp_path / "extra.tfvars.json"
        extra.write_text(json.dumps({"d": "var-file", "e": "var-file"}), encoding="utf-8")
        module_dir = make_module(
            variables={k: {"default": "default"} for k in "abcde"},
            extra_files={
                "terraform.tfvars.json": {"b": "tfvars", "c": "tfvars", "d": "tfvars", "e": "tfvars"},
                "x.auto.tfvars.json": {"c": "auto", "d": "auto", "e": "auto"},
            },
        )
        module = loader.load_module(module_dir, var_files=[extra], variables={"e": "cli"})

        assert module.variable_values == {
            "a": "default",
            "b": "tfvars",
            "c": "auto",
            "d": "var-file",
            "e": "cli",
        }

    def test_auto_tfvars_applied_in_name_order(self, loader, make_module):
        module_dir = make_module(
            extra_files={
                "b.auto.tfvars.json": {"team": "second"},
                "a.auto.tfvars.json": {"team": "first"},
            }
        )
        assert loader.load_module(module_dir).variable_values["team"] == "second"

    def test_missing_var_file(self, loader, make_module, tmp_path):
        with pytest.raises(ModuleLoadError, match="Variable file not found"):
            loader.load_module(make_module(), var_files=[tmp_path / "nope.tfvars.json"])

    def test_var_file_must_be_object(self, loader, tmp_path):
        path = tmp_path / "list.tfvars.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ModuleLoadError, match="must contain a JSON object"):
            loader.load_var_file(path)


class TestLoadErrors:
    def test_missing_directory(self, loader, tmp_path):
        with pytest.raises(ModuleLoadError, match="does not exist"):
            loader.load_module(tmp_path / "missing")

    def test_not_a_directory(self, loader, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(ModuleLoadError, match="not a directory"):
            loader.load_module(path)

    def test_invalid_json(self, loader, make_module):
        module_dir = make_module(extra_files={"broken.tf.json": '{"resource": '})
        with pytest.raises(ModuleLoadError, match="invalid JSON"):
            loader.load_module(module_dir)

    def test_top_level_must_be_object(self, loader, make_module):
        module_dir = make_module(extra_files={"list.tf.json": "[]"})
        with pytest.raises(ModuleLoadError, match="top-level value"):
            loader.load_module(module_dir)

    def test_resource_body_must_be_object(self, loader, make_module):
        module_dir = make_module({"g": "not-an-object"})
        with pytest.raises(ModuleLoadError, match="resource body must be a JSON object"):
            loader.load_module(module_dir)

    def test_file_size_limit(self, make_module):
        module_dir = make_module({"g": {"name": "x" * 2048}})
        with pytest.raises(ModuleLoadError, match="exceeds"):
            ModuleLoader(max_file_size_mb=0).load_module(module_dir)


class TestIsModuleDirectory:
    def test_directory_with_config(self, loader, make_module):
        assert loader.is_module_directory(make_module())

    def test_directory_without_config(self, loader, tmp_path):
        (tmp_path / "vars.auto.tfvars.json").write_text("{}")
        assert not loader.is_module_directory(tmp_path)
