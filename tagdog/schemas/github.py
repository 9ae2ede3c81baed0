from pydantic import BaseModel, ConfigDict, Field


class GitHubUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str


class PushRepository(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    owner: GitHubUser


class PushEvent(BaseModel):
    """
    The fields of a GitHub ``push`` delivery that tag auditing relies on.

    https://docs.github.com/en/webhooks/webhook-events-and-payloads#push
    """

    model_config = ConfigDict(frozen=True)

    ref: str
    created: bool = False
    after: str
    repository: PushRepository
    sender: GitHubUser

    @property
    def owner(self) -> str:
        return self.repository.owner.login

    @property
    def repo(self) -> str:
        return self.repository.name

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class IgnoredEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: str


WebhookEvent = PushEvent | IgnoredEvent


class GitObject(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str
    type: str | None = None


class TagReference(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ref: str
    object_: GitObject = Field(alias="object")

    @property
    def sha(self) -> str:
        return self.object_.sha


class IssueRequest(BaseModel):
    title: str
    body: str
    assignees: list[str]
