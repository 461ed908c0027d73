import unittest

from gsreconcile.context import RequestContext
from gsreconcile.errors import ApiError, ValidationError
from gsreconcile.models import (
    HardwareProfile,
    IPAttachment,
    NetworkAttachment,
    PeripheralKind,
    PeripheralRef,
    ServerSpec,
    ServerState,
    StorageAttachment,
)
from gsreconcile.plan import (
    reject_declared_public_network,
    validate_in_place_change,
    validate_ip_families,
    validate_server_spec,
)


class FakeFamilyClient:
    def __init__(self, families) -> None:
        self.calls = []
        self.families = families

    def resolve_ip_family(self, ctx, ip_id: str) -> int:
        self.calls.append(ip_id)
        if ip_id not in self.families:
            raise ApiError("boom")
        return self.families[ip_id]


def _spec(**kwargs) -> ServerSpec:
    base = dict(name="web", cores=1, memory_gb=1)
    base.update(kwargs)
    return ServerSpec(**base)


class TestValidateServerSpec(unittest.TestCase):
    def test_valid_spec(self) -> None:
        validate_server_spec(
            _spec(
                storages=(StorageAttachment.of("S1", boot=True), StorageAttachment.of("S2")),
                networks=frozenset({NetworkAttachment.of("N1")}),
                ipv4=IPAttachment.of("I4", 4),
            )
        )

    def test_name_required_and_bounded(self) -> None:
        with self.assertRaises(ValidationError):
            validate_server_spec(_spec(name="   "))
        with self.assertRaises(ValidationError):
            validate_server_spec(_spec(name="x" * 65))
        validate_server_spec(_spec(name="x" * 64))

    def test_resources_must_be_positive(self) -> None:
        with self.assertRaises(ValidationError):
            validate_server_spec(_spec(cores=0))
        with self.assertRaises(ValidationError):
            validate_server_spec(_spec(memory_gb=0))

    def test_two_boot_storages_rejected(self) -> None:
        spec = _spec(
            storages=(StorageAttachment.of("S1", boot=True), StorageAttachment.of("S2", boot=True))
        )
        with self.assertRaises(ValidationError) as cm:
            validate_server_spec(spec)
        self.assertEqual(cm.exception.details["boot_storages"], ["S1", "S2"])

    def test_attachment_limits(self) -> None:
        storages = tuple(StorageAttachment.of(f"S{i}") for i in range(9))
        with self.assertRaises(ValidationError):
            validate_server_spec(_spec(storages=storages))

        networks = frozenset(NetworkAttachment.of(f"N{i}") for i in range(8))
        with self.assertRaises(ValidationError):
            validate_server_spec(_spec(networks=networks))

    def test_duplicate_storage_rejected(self) -> None:
        spec = _spec(storages=(StorageAttachment.of("S1"), StorageAttachment.of("S1", boot=True)))
        with self.assertRaises(ValidationError):
            validate_server_spec(spec)

    def test_ip_in_wrong_slot_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            validate_server_spec(_spec(ipv4=IPAttachment.of("I6", 6)))
        wrong = IPAttachment(PeripheralRef("I4", PeripheralKind.PUBLIC_IP), 4)
        with self.assertRaises(ValidationError):
            validate_server_spec(_spec(ipv6=wrong))


class TestValidateIpFamilies(unittest.TestCase):
    def setUp(self) -> None:
        self.ctx = RequestContext.background()

    def test_matching_families_pass(self) -> None:
        client = FakeFamilyClient({"I4": 4, "I6": 6})
        validate_ip_families(
            _spec(ipv4=IPAttachment.of("I4", 4), ipv6=IPAttachment.of("I6", 6)), client, self.ctx
        )
        self.assertEqual(client.calls, ["I4", "I6"])

    def test_mismatch_message_names_ip_and_version(self) -> None:
        client = FakeFamilyClient({"I6": 4})
        with self.assertRaises(ValidationError) as cm:
            validate_ip_families(_spec(ipv6=IPAttachment.of("I6", 6)), client, self.ctx)
        self.assertEqual(str(cm.exception), "The IP address with UUID I6 is not version 6")

    def test_only_restricts_lookups(self) -> None:
        client = FakeFamilyClient({"I6": 6})
        validate_ip_families(
            _spec(ipv4=IPAttachment.of("I4", 4), ipv6=IPAttachment.of("I6", 6)),
            client,
            self.ctx,
            only={"I6"},
        )
        self.assertEqual(client.calls, ["I6"])

    def test_lookup_failure_becomes_validation_error(self) -> None:
        client = FakeFamilyClient({})
        with self.assertRaises(ValidationError) as cm:
            validate_ip_families(_spec(ipv4=IPAttachment.of("I4", 4)), client, self.ctx)
        self.assertIsInstance(cm.exception.cause, ApiError)


class TestValidateInPlaceChange(unittest.TestCase):
    def test_unreported_location_is_not_compared(self) -> None:
        validate_in_place_change(ServerState("SRV"), _spec(location_id="ANY"))

    def test_profile_mismatch_rejected(self) -> None:
        old = ServerState("SRV", hardware_profile=HardwareProfile.Q35)
        with self.assertRaises(ValidationError) as cm:
            validate_in_place_change(old, _spec())
        self.assertEqual(cm.exception.details["observed"], "q35")
        self.assertEqual(cm.exception.details["desired"], "default")


class TestRejectDeclaredPublicNetwork(unittest.TestCase):
    def test_public_network_in_networks_rejected(self) -> None:
        public = PeripheralRef("PUB", PeripheralKind.NETWORK)
        spec = _spec(networks=frozenset({NetworkAttachment.of("N1"), NetworkAttachment.of("PUB")}))
        with self.assertRaises(ValidationError) as cm:
            reject_declared_public_network(spec, public)
        self.assertEqual(cm.exception.details["network_id"], "PUB")

    def test_private_networks_pass(self) -> None:
        public = PeripheralRef("PUB", PeripheralKind.NETWORK)
        reject_declared_public_network(_spec(networks=frozenset({NetworkAttachment.of("N1")})), public)


if __name__ == "__main__":
    unittest.main()
