import unittest

from gsreconcile.context import RequestContext
from gsreconcile.errors import NotFoundError, ValidationError
from gsreconcile.models import (
    IPAttachment,
    NetworkAttachment,
    PeripheralKind,
    PeripheralRef,
    ServerSpec,
    StorageAttachment,
    iso_ref,
)
from gsreconcile.plan import OperationKind, build_creation


class FakeClient:
    def __init__(self, families=None, public_network_missing: bool = False) -> None:
        self.calls = []
        self.families = families or {}
        self.public_network_missing = public_network_missing

    def resolve_ip_family(self, ctx, ip_id: str) -> int:
        self.calls.append(("resolve_ip_family", ip_id))
        return self.families[ip_id]

    def resolve_public_network(self, ctx) -> PeripheralRef:
        self.calls.append(("resolve_public_network",))
        if self.public_network_missing:
            raise NotFoundError("Public network not found")
        return PeripheralRef("PUBNET", PeripheralKind.NETWORK)


class TestBuildCreation(unittest.TestCase):
    def setUp(self) -> None:
        self.ctx = RequestContext.background()

    def test_only_boot_storage_goes_into_create_call(self) -> None:
        spec = ServerSpec(
            name="web",
            cores=2,
            memory_gb=4,
            storages=(
                StorageAttachment.of("DATA1"),
                StorageAttachment.of("BOOT", boot=True),
                StorageAttachment.of("DATA2"),
            ),
            power_on=True,
        )
        payload, plan = build_creation(spec, FakeClient(), self.ctx)

        self.assertEqual(payload.boot_storage.ref.object_id, "BOOT")
        self.assertEqual(
            plan.kinds,
            [OperationKind.LINK_STORAGE, OperationKind.LINK_STORAGE, OperationKind.START],
        )
        self.assertEqual([op.target for op in plan.operations[:2]], ["DATA1", "DATA2"])
        self.assertEqual(plan.server_id, "")

    def test_without_boot_storage_every_storage_is_linked_later(self) -> None:
        spec = ServerSpec(
            name="web",
            cores=1,
            memory_gb=1,
            storages=(StorageAttachment.of("A"), StorageAttachment.of("B")),
        )
        payload, plan = build_creation(spec, FakeClient(), self.ctx)

        self.assertIsNone(payload.boot_storage)
        self.assertEqual(plan.kinds, [OperationKind.LINK_STORAGE, OperationKind.LINK_STORAGE])

    def test_stopped_server_without_extra_storage_has_empty_plan(self) -> None:
        spec = ServerSpec(name="web", cores=1, memory_gb=1, iso_image=iso_ref("ISO"))
        payload, plan = build_creation(spec, FakeClient(), self.ctx)

        self.assertTrue(plan.is_empty())
        self.assertEqual(payload.iso_image.object_id, "ISO")
        self.assertEqual(payload.location_id, spec.location_id)

    def test_public_ips_pull_in_public_network(self) -> None:
        client = FakeClient(families={"I4": 4, "I6": 6})
        spec = ServerSpec(
            name="web",
            cores=1,
            memory_gb=1,
            ipv4=IPAttachment.of("I4", 4),
            ipv6=IPAttachment.of("I6", 6),
            networks=frozenset({NetworkAttachment.of("N2"), NetworkAttachment.of("N1")}),
        )
        payload, _ = build_creation(spec, client, self.ctx)

        self.assertEqual([ip.ref.object_id for ip in payload.ips], ["I4", "I6"])
        self.assertEqual(payload.public_network.ref.object_id, "PUBNET")
        self.assertEqual([n.ref.object_id for n in payload.networks], ["N1", "N2"])

    def test_no_public_network_lookup_without_ips(self) -> None:
        client = FakeClient()
        payload, _ = build_creation(ServerSpec(name="web", cores=1, memory_gb=1), client, self.ctx)

        self.assertIsNone(payload.public_network)
        self.assertEqual(client.calls, [])

    def test_family_mismatch_is_rejected(self) -> None:
        client = FakeClient(families={"I4": 6})
        spec = ServerSpec(name="web", cores=1, memory_gb=1, ipv4=IPAttachment.of("I4", 4))

        with self.assertRaises(ValidationError) as cm:
            build_creation(spec, client, self.ctx)
        self.assertIn("is not version 4", str(cm.exception))
        self.assertNotIn(("resolve_public_network",), client.calls)

    def test_invalid_spec_fails_before_any_remote_call(self) -> None:
        client = FakeClient(families={"I4": 4})
        spec = ServerSpec(name="", cores=1, memory_gb=1, ipv4=IPAttachment.of("I4", 4))

        with self.assertRaises(ValidationError):
            build_creation(spec, client, self.ctx)
        self.assertEqual(client.calls, [])

    def test_missing_public_network_is_a_validation_error(self) -> None:
        client = FakeClient(families={"I4": 4}, public_network_missing=True)
        spec = ServerSpec(name="web", cores=1, memory_gb=1, ipv4=IPAttachment.of("I4", 4))

        with self.assertRaises(ValidationError) as cm:
            build_creation(spec, client, self.ctx)
        self.assertIsInstance(cm.exception.cause, NotFoundError)

    def test_public_network_listed_in_networks_is_rejected(self) -> None:
        client = FakeClient()
        spec = ServerSpec(
            name="web",
            cores=1,
            memory_gb=1,
            networks=frozenset({NetworkAttachment.of("PUBNET")}),
        )

        with self.assertRaises(ValidationError) as cm:
            build_creation(spec, client, self.ctx)
        self.assertEqual(cm.exception.details["network_id"], "PUBNET")

    def test_private_networks_without_public_network_are_fine(self) -> None:
        client = FakeClient(public_network_missing=True)
        spec = ServerSpec(
            name="web",
            cores=1,
            memory_gb=1,
            networks=frozenset({NetworkAttachment.of("N1")}),
        )

        payload, _ = build_creation(spec, client, self.ctx)
        self.assertIsNone(payload.public_network)
        self.assertEqual([n.ref.object_id for n in payload.networks], ["N1"])


if __name__ == "__main__":
    unittest.main()
