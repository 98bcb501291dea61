"""SpiceDB client implementation of the AuthorizationClient protocol.

Provides an async client wrapping the authzed library with proper
error handling and type safety. Tuples map onto SpiceDB relationships as
``object`` -> resource, ``relation`` -> relation, ``user`` -> subject.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from authzed.api.v1 import (
    Consistency,
    ObjectReference,
    Relationship,
    RelationshipUpdate,
    SubjectReference,
)
from authzed.api.v1.permission_service_pb2 import (
    CheckPermissionRequest,
    CheckPermissionResponse,
    ExpandPermissionTreeRequest,
    LookupResourcesRequest,
    WriteRelationshipsRequest,
)
from google.protobuf.json_format import MessageToDict
from google.protobuf.struct_pb2 import Struct
from grpcutil import bearer_token_credentials, insecure_bearer_token_credentials

from permcache.shared_kernel.authorization.exceptions import (
    SpiceDBConnectionError,
    SpiceDBRequestError,
)
from permcache.shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from permcache.shared_kernel.authorization.types import TupleKey


class RelationshipOperation(Enum):
    """Relationship update operations used by the client."""

    WRITE = RelationshipUpdate.OPERATION_TOUCH
    DELETE = RelationshipUpdate.OPERATION_DELETE


def _parse_reference(value: str, kind: str) -> tuple[str, str]:
    """Split a 'type:id' reference into (type, id)."""
    if ":" not in value:
        raise ValueError(f"Invalid {kind} format: {value!r} (expected 'type:id')")
    object_type, object_id = value.split(":", 1)
    return object_type, object_id


def _parse_subject_reference(value: str) -> tuple[str, str, str | None]:
    """Split a 'type:id' or 'type:id#relation' subject into its parts."""
    reference, _, relation = value.partition("#")
    object_type, object_id = _parse_reference(reference, "subject")
    return object_type, object_id, relation or None


def _object_reference(value: str) -> ObjectReference:
    object_type, object_id = _parse_reference(value, "object")
    return ObjectReference(object_type=object_type, object_id=object_id)


def _subject_reference(value: str) -> SubjectReference:
    object_type, object_id, relation = _parse_subject_reference(value)
    subject = SubjectReference(
        object=ObjectReference(object_type=object_type, object_id=object_id)
    )
    if relation:
        subject.optional_relation = relation
    return subject


def _build_relationship_update(
    tuple_key: TupleKey,
    operation: RelationshipOperation,
) -> RelationshipUpdate:
    """Build a RelationshipUpdate for a tuple."""
    return RelationshipUpdate(
        operation=operation.value,
        relationship=Relationship(
            resource=_object_reference(tuple_key.object),
            relation=tuple_key.relation,
            subject=_subject_reference(tuple_key.user),
        ),
    )


class SpiceDBAuthorizationClient:
    """SpiceDB client implementation of the AuthorizationClient protocol.

    The gRPC client is created lazily on first use and reused for the
    lifetime of the instance; it handles connection pooling internally.
    """

    def __init__(
        self,
        endpoint: str,
        preshared_key: str,
        use_tls: bool = True,
        cert_path: str | None = None,
        probe: AuthorizationProbe | None = None,
    ):
        """Initialize SpiceDB client.

        Args:
            endpoint: SpiceDB gRPC endpoint (e.g., "localhost:50051")
            preshared_key: Pre-shared key for authentication
            use_tls: Whether to use a TLS channel
            cert_path: Optional CA certificate for TLS
            probe: Optional domain probe for observability
        """
        self._endpoint = endpoint
        self._preshared_key = preshared_key
        self._use_tls = use_tls
        self._cert_path = cert_path
        self._client = None
        self._probe = probe or DefaultAuthorizationProbe()

    async def _ensure_client(self):
        """Lazily initialize the gRPC client."""
        if self._client is None:
            try:
                from authzed.api.v1 import AsyncClient

                if self._use_tls:
                    cert_chain = None
                    if self._cert_path:
                        with open(self._cert_path, "rb") as f:
                            cert_chain = f.read()
                    credentials = bearer_token_credentials(
                        self._preshared_key, cert_chain
                    )
                else:
                    credentials = insecure_bearer_token_credentials(
                        self._preshared_key
                    )

                self._client = AsyncClient(self._endpoint, credentials)
            except Exception as e:
                self._probe.connection_failed(endpoint=self._endpoint, error=e)
                raise SpiceDBConnectionError(
                    f"Failed to connect to SpiceDB at {self._endpoint}: {e}"
                ) from e

    async def check(
        self,
        user: str,
        relation: str,
        object: str,
        contextual_tuples: Sequence[TupleKey] = (),
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        """Check if user has relation (permission) on object.

        Args:
            user: Subject identifier (e.g., "user:alice")
            relation: Permission to check (e.g., "view")
            object: Resource identifier (e.g., "document:readme")
            contextual_tuples: Unsupported by SpiceDB; must be empty
            context: Caveat context passed with the check

        Returns:
            True if permission is granted, False otherwise

        Raises:
            ValueError: If contextual tuples are supplied
            SpiceDBRequestError: If the check fails
        """
        if contextual_tuples:
            raise ValueError("SpiceDB does not support contextual tuples")

        request = CheckPermissionRequest(
            consistency=Consistency(fully_consistent=True),
            resource=_object_reference(object),
            permission=relation,
            subject=_subject_reference(user),
        )
        if context:
            caveat_context = Struct()
            caveat_context.update(dict(context))
            request.context.CopyFrom(caveat_context)

        await self._ensure_client()
        assert self._client is not None  # For mypy

        try:
            response = await self._client.CheckPermission(request)
        except Exception as e:
            self._probe.permission_check_failed(
                user=user, relation=relation, object=object, error=e
            )
            raise SpiceDBRequestError(
                f"Failed to check permission: {user} {relation} {object}"
            ) from e

        allowed = (
            response.permissionship
            == CheckPermissionResponse.PERMISSIONSHIP_HAS_PERMISSION
        )
        self._probe.permission_checked(
            user=user, relation=relation, object=object, allowed=allowed
        )
        return allowed

    async def write_tuples(self, tuples: Sequence[TupleKey]) -> None:
        """Write tuples in a single WriteRelationships call.

        Raises:
            SpiceDBRequestError: If the write fails
        """
        if not tuples:
            return
        await self._send_updates(tuples, RelationshipOperation.WRITE)

    async def delete_tuples(self, tuples: Sequence[TupleKey]) -> None:
        """Delete tuples in a single WriteRelationships call.

        Raises:
            SpiceDBRequestError: If the delete fails
        """
        if not tuples:
            return
        await self._send_updates(tuples, RelationshipOperation.DELETE)

    async def _send_updates(
        self,
        tuples: Sequence[TupleKey],
        operation: RelationshipOperation,
    ) -> None:
        updates = [_build_relationship_update(t, operation) for t in tuples]

        await self._ensure_client()
        assert self._client is not None  # For mypy

        try:
            await self._client.WriteRelationships(
                WriteRelationshipsRequest(updates=updates)
            )
        except Exception as e:
            if operation is RelationshipOperation.WRITE:
                self._probe.tuples_write_failed(count=len(tuples), error=e)
            else:
                self._probe.tuples_delete_failed(count=len(tuples), error=e)
            raise SpiceDBRequestError(
                f"Failed to {operation.name.lower()} {len(tuples)} relationships"
            ) from e

        if operation is RelationshipOperation.WRITE:
            self._probe.tuples_written(count=len(tuples))
        else:
            self._probe.tuples_deleted(count=len(tuples))

    async def list_objects(
        self,
        user: str,
        relation: str,
        object_type: str,
        contextual_tuples: Sequence[TupleKey] = (),
        context: Mapping[str, Any] | None = None,
    ) -> list[str]:
        """List resources of object_type on which user has the permission.

        Raises:
            ValueError: If contextual tuples are supplied
            SpiceDBRequestError: If the lookup fails
        """
        if contextual_tuples:
            raise ValueError("SpiceDB does not support contextual tuples")

        request = LookupResourcesRequest(
            consistency=Consistency(fully_consistent=True),
            resource_object_type=object_type,
            permission=relation,
            subject=_subject_reference(user),
        )
        if context:
            caveat_context = Struct()
            caveat_context.update(dict(context))
            request.context.CopyFrom(caveat_context)

        await self._ensure_client()
        assert self._client is not None  # For mypy

        objects: list[str] = []
        try:
            async for response in self._client.LookupResources(request):
                objects.append(f"{object_type}:{response.resource_object_id}")
        except Exception as e:
            self._probe.request_failed(operation="lookup_resources", error=e)
            raise SpiceDBRequestError(
                f"Failed to list objects: {user} {relation} {object_type}"
            ) from e

        self._probe.objects_listed(
            user=user,
            relation=relation,
            object_type=object_type,
            count=len(objects),
        )
        return objects

    async def expand(self, relation: str, object: str) -> dict[str, Any]:
        """Expand the permission tree for relation on object.

        Raises:
            SpiceDBRequestError: If the expand request fails
        """
        request = ExpandPermissionTreeRequest(
            consistency=Consistency(fully_consistent=True),
            resource=_object_reference(object),
            permission=relation,
        )

        await self._ensure_client()
        assert self._client is not None  # For mypy

        try:
            response = await self._client.ExpandPermissionTree(request)
        except Exception as e:
            self._probe.request_failed(operation="expand_permission_tree", error=e)
            raise SpiceDBRequestError(
                f"Failed to expand permission tree: {relation} {object}"
            ) from e

        return MessageToDict(response.tree_root, preserving_proto_field_name=True)
