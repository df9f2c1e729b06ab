"""Typed Azure DevOps REST response payloads.

Only the fields reviewrag reads are declared; everything else in a payload
is ignored.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AdoModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GitItem(AdoModel):
    path: str = ""
    is_folder: bool = Field(default=False, alias="isFolder")
    object_id: str | None = Field(default=None, alias="objectId")
    content: str | None = None


class GitItemList(AdoModel):
    value: list[GitItem] = Field(default_factory=list)


class IdentityRef(AdoModel):
    display_name: str = Field(default="", alias="displayName")
    unique_name: str = Field(default="", alias="uniqueName")


class CommitRef(AdoModel):
    commit_id: str = Field(default="", alias="commitId")


class RepositoryRef(AdoModel):
    id: str = ""
    name: str = ""


class PullRequestPayload(AdoModel):
    pull_request_id: int = Field(alias="pullRequestId")
    title: str = ""
    description: str | None = None
    source_ref_name: str = Field(default="", alias="sourceRefName")
    target_ref_name: str = Field(default="", alias="targetRefName")
    status: str = ""
    created_by: IdentityRef = Field(default_factory=IdentityRef, alias="createdBy")
    creation_date: datetime | None = Field(default=None, alias="creationDate")
    last_merge_source_commit: CommitRef | None = Field(
        default=None, alias="lastMergeSourceCommit"
    )
    last_merge_target_commit: CommitRef | None = Field(
        default=None, alias="lastMergeTargetCommit"
    )
    repository: RepositoryRef | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status_as_text(cls, value):
        return "" if value is None else str(value)


class PullRequestList(AdoModel):
    value: list[PullRequestPayload] = Field(default_factory=list)


class Iteration(AdoModel):
    id: int


class IterationList(AdoModel):
    value: list[Iteration] = Field(default_factory=list)


class ChangeEntry(AdoModel):
    change_type: str = Field(default="edit", alias="changeType")
    item: GitItem | None = None


class IterationChanges(AdoModel):
    change_entries: list[ChangeEntry] = Field(default_factory=list, alias="changeEntries")


class CommentThread(AdoModel):
    id: int
    status: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status_as_text(cls, value):
        return None if value is None else str(value)
