import logging

import pytest

from arbor.config.settings import StepConfig
from arbor.models.diagnostics import Diagnostic, Severity
from arbor.validation.rules import one_of, required_field
from arbor.validation.validator import StepConfigError, StepValidator, builtin_validator, validate_step_config


def cfg(**fields):
    return StepConfig.model_validate(fields)


class TestBuiltinRules:
    def test_file_copy_requires_from_and_to(self):
        with pytest.raises(StepConfigError) as exc_info:
            validate_step_config("file.copy", cfg(name="file.copy"))
        fields = {d.field for d in exc_info.value.diagnostics.errors}
        assert fields == {"from", "to"}
        assert "2 error(s)" in str(exc_info.value)

    def test_file_copy_valid(self):
        validate_step_config("file.copy", cfg(name="file.copy", **{"from": ".env.example", "to": ".env"}))

    @pytest.mark.parametrize("name", ["bash.run", "command.run"])
    def test_command_required(self, name):
        with pytest.raises(StepConfigError, match="command"):
            validate_step_config(name, cfg(name=name))

    @pytest.mark.parametrize("name", ["env.read", "env.write"])
    def test_key_required(self, name):
        with pytest.raises(StepConfigError, match="key"):
            validate_step_config(name, cfg(name=name))

    def test_binary_steps_need_a_name(self):
        with pytest.raises(StepConfigError):
            validate_step_config("", cfg())
        validate_step_config("node.npm", cfg(name="node.npm", args=["ci"]))

    def test_unknown_db_type_is_only_a_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="arbor.validation.validator"):
            collection = validate_step_config("db.create", cfg(name="db.create", type="oracle"))
        assert not collection.has_errors
        assert collection.warnings[0].rule == "one_of"
        assert "oracle" in caplog.text

    def test_store_as_warning_on_steps_that_ignore_it(self):
        collection = validate_step_config("node.npm", cfg(name="node.npm", store_as="X"))
        assert [w.field for w in collection.warnings] == ["store_as"]


class TestStepValidator:
    def test_all_failures_reported_together(self):
        validator = StepValidator("custom", [required_field("key"), required_field("value")])
        collection = validator.validate(cfg(name="custom"))
        assert len(collection.errors) == 2

    def test_add_rule_chains(self):
        validator = StepValidator("custom").add_rule(one_of("type", ["a"]))
        assert validator.validate(cfg(type="b")).has_errors

    def test_custom_rule(self):
        def never(step, config):
            return [Diagnostic(rule="never", severity=Severity.ERROR, message="nope", step=step)]

        with pytest.raises(StepConfigError, match=r"\[never\] nope"):
            StepValidator("x", [never]).validate_or_raise(cfg())

    def test_builtin_validator_falls_back_to_binary_rules(self):
        assert builtin_validator("php.composer").validate(cfg(name="php.composer")).diagnostics == []
