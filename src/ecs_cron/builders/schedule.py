# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Scheduler and notification wiring.

Two independent, unordered EventBridge rules:
- ScheduleRule fires on the schedule expression and runs one task
- FailureRule matches this job's tasks stopping with a non-zero exit code
  and publishes a message to the failure topic

No overlap guard is declared. If the schedule fires faster than runs finish,
runs overlap.
"""

from typing import Any, Dict

from ecs_cron.schemas import JobParams, Resource, get_att, ref, sub


SCHEDULE_RULE_ID = "ScheduleRule"
FAILURE_RULE_ID = "FailureRule"
FAILURE_TOPIC_ID = "FailureTopic"
TOPIC_POLICY_ID = "FailureTopicPolicy"

ESSENTIAL_EXIT_REASON = "Essential container in task exited"
TASK_STATE_CHANGE = "ECS Task State Change"


def log_console_url(task_name: str) -> str:
    """CloudWatch console URL for the job's log group, region left as ${AWS::Region}."""
    return (
        "https://${AWS::Region}.console.aws.amazon.com/cloudwatch/home"
        f"?region=${{AWS::Region}}#logsV2:log-groups/log-group/{task_name}"
    )


def build_schedule_rule(
    params: JobParams,
    cluster_arn: Any,
    task_definition_arn: Any,
    trigger_role_arn: Any,
) -> Resource:
    """Time-based rule launching exactly one task per firing."""
    return Resource(
        logical_id=SCHEDULE_RULE_ID,
        type="AWS::Events::Rule",
        properties={
            "Name": f"{params.task_name}-schedule",
            "Description": f"Runs {params.task_name} on {params.cloudwatch_schedule_expression}",
            "ScheduleExpression": params.cloudwatch_schedule_expression,
            "State": "ENABLED",
            "Targets": [
                {
                    "Id": params.task_name,
                    "Arn": cluster_arn,
                    "RoleArn": trigger_role_arn,
                    "EcsParameters": {
                        "TaskDefinitionArn": task_definition_arn,
                        "TaskCount": 1,
                        "LaunchType": "FARGATE",
                        "NetworkConfiguration": {
                            "AwsVpcConfiguration": {
                                "Subnets": list(params.subnet_ids),
                                "AssignPublicIp": "ENABLED" if params.assign_public_ip else "DISABLED",
                            }
                        },
                    },
                }
            ],
        },
    )


def build_failure_topic(params: JobParams) -> Resource:
    """SNS topic receiving the failure notices; its ARN is the plan output."""
    return Resource(
        logical_id=FAILURE_TOPIC_ID,
        type="AWS::SNS::Topic",
        properties={"TopicName": f"{params.task_name}-failures"},
    )


def failure_event_pattern(cluster_arn: Any, task_definition_arn: Any) -> Dict[str, Any]:
    """Match stopped tasks of this job whose essential container exited non-zero."""
    return {
        "source": ["aws.ecs"],
        "detail-type": [TASK_STATE_CHANGE],
        "detail": {
            "lastStatus": ["STOPPED"],
            "stoppedReason": [ESSENTIAL_EXIT_REASON],
            "containers": {"exitCode": [{"anything-but": 0}]},
            "clusterArn": [cluster_arn],
            "taskDefinitionArn": [task_definition_arn],
        },
    }


def failure_message_template(task_name: str) -> Any:
    """Fixed-shape notification text; <taskArn> is filled in by EventBridge."""
    return sub(
        f'"Scheduled job {task_name} failed: task <taskArn> stopped with a '
        f'non-zero exit code. Logs: {log_console_url(task_name)}"'
    )


def build_failure_rule(
    params: JobParams,
    cluster_arn: Any,
    task_definition_arn: Any,
    topic_arn: Any,
) -> Resource:
    """Rule publishing a failure notice when a run exits non-zero."""
    return Resource(
        logical_id=FAILURE_RULE_ID,
        type="AWS::Events::Rule",
        properties={
            "Name": f"{params.task_name}-failures",
            "Description": f"Notifies when {params.task_name} exits with a non-zero code",
            "EventPattern": failure_event_pattern(cluster_arn, task_definition_arn),
            "State": "ENABLED",
            "Targets": [
                {
                    "Id": f"{params.task_name}-failure-topic",
                    "Arn": topic_arn,
                    "InputTransformer": {
                        "InputPathsMap": {"taskArn": "$.detail.taskArn"},
                        "InputTemplate": failure_message_template(params.task_name),
                    },
                }
            ],
        },
    )


def build_topic_policy(topic_arn: Any) -> Resource:
    """Allow EventBridge to publish to the topic, only from the failure rule."""
    return Resource(
        logical_id=TOPIC_POLICY_ID,
        type="AWS::SNS::TopicPolicy",
        properties={
            "Topics": [topic_arn],
            "PolicyDocument": {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Principal": {"Service": "events.amazonaws.com"},
                        "Action": "sns:Publish",
                        "Resource": topic_arn,
                        "Condition": {
                            "ArnEquals": {"aws:SourceArn": get_att(FAILURE_RULE_ID, "Arn")}
                        },
                    }
                ],
            },
        },
    )


def topic_arn() -> Any:
    """SNS topics return their ARN from Ref."""
    return ref(FAILURE_TOPIC_ID)
