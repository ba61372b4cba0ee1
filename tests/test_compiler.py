# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Tests for compiler.py module."""

import logging

import pytest

from ecs_cron.compiler import TOPIC_OUTPUT, compile_params, compile_plan
from ecs_cron.errors import CompileError, ParamError


TASK_ROLE = "arn:aws:iam::123456789012:role/app"


class TestCompilePlan:
    """Whole-plan properties."""

    def test_resource_order(self, params):
        plan = compile_plan(params)

        assert plan.logical_ids() == [
            "Cluster",
            "ExecutionRole",
            "ExecutionLoggingPolicy",
            "TaskDefinition",
            "TriggerRole",
            "ScheduleRule",
            "FailureTopic",
            "FailureRule",
            "FailureTopicPolicy",
        ]

    def test_single_output_is_topic_arn(self, params):
        plan = compile_plan(params)
        assert plan.outputs == {TOPIC_OUTPUT: {"Ref": "FailureTopic"}}

    def test_params_recorded(self, params):
        plan = compile_plan(params)
        assert plan.params["task_name"] == "etl-job"
        assert plan.job_name == "etl-job"

    def test_scenario_new_cluster(self, make_params):
        """etl-job, no cluster name, cpu 2048, no overlay."""
        plan = compile_plan(make_params(task_cpu=2048, extra_container_defs={}))

        clusters = plan.of_type("AWS::ECS::Cluster")
        assert len(clusters) == 1
        assert clusters[0].properties["ClusterName"] == "etl-job"

        container = plan.get("TaskDefinition").properties["ContainerDefinitions"][0]
        assert container["cpu"] == 2
        assert container["memoryReservation"] == 2048
        assert container["logConfiguration"]["options"]["awslogs-group"] == "etl-job"

    def test_existing_cluster(self, make_params):
        """No cluster declared, and every consumer uses the looked-up ARN."""
        plan = compile_plan(make_params(ecs_cluster_name="shared"))
        expected = {
            "Fn::Sub": "arn:${AWS::Partition}:ecs:${AWS::Region}:${AWS::AccountId}:cluster/shared"
        }

        assert plan.of_type("AWS::ECS::Cluster") == []
        assert not plan.has("Cluster")
        assert plan.get("ScheduleRule").properties["Targets"][0]["Arn"] == expected
        detail = plan.get("FailureRule").properties["EventPattern"]["detail"]
        assert detail["clusterArn"] == [expected]

    def test_scenario_shared_execution_role(self, make_params):
        """Override role gets the logging policy and no new role is declared."""
        plan = compile_plan(make_params(ecs_task_execution_role_name="shared-role"))

        roles = plan.of_type("AWS::IAM::Role")
        assert [r.logical_id for r in roles] == ["TriggerRole"]
        assert plan.get("ExecutionLoggingPolicy").properties["Roles"] == ["shared-role"]

    def test_failure_rule_uses_plan_arns(self, params):
        plan = compile_plan(params)

        detail = plan.get("FailureRule").properties["EventPattern"]["detail"]
        assert detail["clusterArn"] == [{"Fn::GetAtt": ["Cluster", "Arn"]}]
        assert detail["taskDefinitionArn"] == [{"Ref": "TaskDefinition"}]

    def test_schedule_wired_to_trigger_role(self, params):
        plan = compile_plan(params)

        target = plan.get("ScheduleRule").properties["Targets"][0]
        assert target["RoleArn"] == {"Fn::GetAtt": ["TriggerRole", "Arn"]}
        assert target["EcsParameters"]["TaskDefinitionArn"] == {"Ref": "TaskDefinition"}

    @pytest.mark.parametrize("task_role,expected_len", [(None, 1), (TASK_ROLE, 2)])
    def test_pass_role_iff_task_role(self, make_params, task_role, expected_len):
        plan = compile_plan(make_params(task_role_arn=task_role))

        statements = plan.get("TriggerRole").properties["Policies"][0]["PolicyDocument"]["Statement"]
        pass_role = statements[1]["Resource"]
        assert len(pass_role) == expected_len
        assert pass_role[0] == {"Fn::GetAtt": ["ExecutionRole", "Arn"]}
        assert (TASK_ROLE in pass_role) == (task_role is not None)

    def test_execution_role_arn_consistent(self, params):
        """Task definition and PassRole grant use the same execution role ARN."""
        plan = compile_plan(params)

        exec_arn = plan.get("TaskDefinition").properties["ExecutionRoleArn"]
        statements = plan.get("TriggerRole").properties["Policies"][0]["PolicyDocument"]["Statement"]
        assert statements[1]["Resource"][0] == exec_arn

    def test_reserved_overlay_key_fails(self, make_params):
        params = make_params(extra_container_defs={"logConfiguration": {"logDriver": "json-file"}})

        with pytest.raises(CompileError, match="logConfiguration"):
            compile_plan(params)

    def test_logs_summary(self, params, caplog):
        with caplog.at_level(logging.INFO, logger="ecs_cron.compiler"):
            compile_plan(params)

        assert "Compiled plan for etl-job: 9 resources" in caplog.text


class TestCompileParams:
    """Raw mapping entry point."""

    def test_compiles_mapping(self, raw_params):
        plan = compile_params(raw_params)
        assert len(plan) == 9

    def test_raises_param_error(self, raw_params):
        raw_params["cloudwatch_schedule_expression"] = "hourly"

        with pytest.raises(ParamError):
            compile_params(raw_params)
