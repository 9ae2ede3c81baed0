from collections.abc import Iterable
from enum import Enum

import structlog

from tagdog.schemas.github import IssueRequest, PushEvent, TagReference
from tagdog.utils.github import GitHubAPIClient

logger = structlog.get_logger(__name__)

TAG_PREFIX = "refs/tags/"
SHADOW_NAMESPACE = "gx/"

ISSUE_TITLE = "Possibly erroneous tag pushed: {tag}"
ISSUE_BODY = """Woof Woof :dog:

@{sender} looks like you pushed old tag into this repo.
Remove this tag by running `git tag -d {tag} && git push origin :{tag}`

This probably happened because your local git repositories still have old tags.
You can remove all of them in one go by running:
 `find libp2p multiformats ipfs -maxdepth 1 -mindepth 1 -type d | while read dir; do; cd $dir; git fetch --prune origin '+refs/tags/*:refs/tags/*'; cd ../..; done` in `$GOPATH/src/github.com/`.

Yours truly, with :poodle:, Tag Dog.
"""


class AuditOutcome(str, Enum):
    NOT_TAG_PUSH = "not_tag_push"
    NO_SHADOW_TAG = "no_shadow_tag"
    ISSUE_CREATED = "issue_created"
    FETCH_FAILED = "fetch_failed"
    CREATE_FAILED = "create_failed"

    @property
    def failed(self) -> bool:
        return self in (AuditOutcome.FETCH_FAILED, AuditOutcome.CREATE_FAILED)


def is_tag_creation(event: PushEvent) -> bool:
    return event.created and event.ref.startswith(TAG_PREFIX)


def tag_name(ref: str) -> str:
    return ref.removeprefix(TAG_PREFIX)


def shadow_ref(tag: str) -> str:
    return f"{TAG_PREFIX}{SHADOW_NAMESPACE}{tag}"


def find_shadow_tag(
    refs: Iterable[TagReference], tag: str, sha: str
) -> TagReference | None:
    wanted = shadow_ref(tag)
    for ref in refs:
        if ref.ref == wanted and ref.sha == sha:
            return ref
    return None


def build_issue(tag: str, sender: str) -> IssueRequest:
    return IssueRequest(
        title=ISSUE_TITLE.format(tag=tag),
        body=ISSUE_BODY.format(tag=tag, sender=sender),
        assignees=[sender],
    )


async def audit_push(event: PushEvent, github: GitHubAPIClient) -> AuditOutcome:
    """
    File an issue when a newly created tag points at the same commit as its
    ``gx/`` shadow tag.

    Every outbound call happens here, so callers can bound the whole chain
    with a single deadline. Redeliveries of the same push file the issue
    again.
    """
    log = logger.bind(repo=event.full_name, ref=event.ref, sender=event.sender.login)

    if not is_tag_creation(event):
        log.debug("Not a tag creation push", created=event.created)
        return AuditOutcome.NOT_TAG_PUSH

    tag = tag_name(event.ref)

    refs = await github.list_tag_refs(event.owner, event.repo)
    if refs is None:
        log.error("Error fetching tag references", tag=tag)
        return AuditOutcome.FETCH_FAILED

    if find_shadow_tag(refs, tag, event.after) is None:
        log.debug(
            "Didn't find matching shadow tag",
            tag=tag,
            shadow_ref=shadow_ref(tag),
            checked=len(refs),
        )
        return AuditOutcome.NO_SHADOW_TAG

    issue_url = await github.create_issue(
        event.owner, event.repo, build_issue(tag, event.sender.login)
    )
    if issue_url is None:
        log.error("Error creating issue", tag=tag)
        return AuditOutcome.CREATE_FAILED

    log.info("Created issue for erroneous tag", tag=tag, issue_url=issue_url)
    return AuditOutcome.ISSUE_CREATED
