"""Tekton resource kinds stored by Tekton Results."""

from __future__ import annotations

from enum import Enum


class ResourceKind(Enum):
    """A run kind and the data types its records are stored under.

    ``may_nest_under_parent`` marks kinds whose records can live under a
    parent run's result (TaskRuns created by a PipelineRun), so a direct
    lookup by UID may miss them.
    """

    PIPELINE_RUN = (
        "pipelinerun",
        "PipelineRun",
        ("tekton.dev/v1.PipelineRun", "tekton.dev/v1beta1.PipelineRun"),
        False,
    )
    TASK_RUN = (
        "taskrun",
        "TaskRun",
        ("tekton.dev/v1.TaskRun", "tekton.dev/v1beta1.TaskRun"),
        True,
    )

    def __init__(
        self,
        slug: str,
        display_name: str,
        data_types: tuple[str, ...],
        may_nest_under_parent: bool,
    ) -> None:
        self.slug = slug
        self.display_name = display_name
        self.data_types = data_types
        self.may_nest_under_parent = may_nest_under_parent
