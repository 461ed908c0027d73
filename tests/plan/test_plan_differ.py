import unittest

from gsreconcile.models import IPAttachment, NetworkAttachment, StorageAttachment, iso_ref
from gsreconcile.plan import diff_attachments, ref_changed


class TestDiffAttachments(unittest.TestCase):
    def test_added_and_removed_by_identity(self) -> None:
        old = (StorageAttachment.of("A"), StorageAttachment.of("B"))
        new = (StorageAttachment.of("B"), StorageAttachment.of("C"))

        diff = diff_attachments(old, new)
        self.assertEqual([s.ref.object_id for s in diff.to_remove], ["A"])
        self.assertEqual([s.ref.object_id for s in diff.to_add], ["C"])

    def test_boot_flag_change_is_not_a_difference(self) -> None:
        old = (StorageAttachment.of("A", boot=True),)
        new = (StorageAttachment.of("A", boot=False),)
        self.assertTrue(diff_attachments(old, new).is_empty())

    def test_ordered_input_keeps_desired_order(self) -> None:
        new = (StorageAttachment.of("Z"), StorageAttachment.of("A"), StorageAttachment.of("M"))
        diff = diff_attachments((), new)
        self.assertEqual([s.ref.object_id for s in diff.to_add], ["Z", "A", "M"])

    def test_sets_are_sorted_by_identity(self) -> None:
        new = frozenset({NetworkAttachment.of("N3"), NetworkAttachment.of("N1"), NetworkAttachment.of("N2")})
        diff = diff_attachments(frozenset(), new)
        self.assertEqual([n.ref.object_id for n in diff.to_add], ["N1", "N2", "N3"])

    def test_firewall_template_change_is_not_a_difference(self) -> None:
        old = frozenset({NetworkAttachment.of("N1", firewall_template_id="FW1")})
        new = frozenset({NetworkAttachment.of("N1", firewall_template_id="FW2")})
        self.assertTrue(diff_attachments(old, new).is_empty())


class TestRefChanged(unittest.TestCase):
    def test_none_to_some_and_back(self) -> None:
        self.assertTrue(ref_changed(None, iso_ref("I")))
        self.assertTrue(ref_changed(iso_ref("I"), None))
        self.assertFalse(ref_changed(None, None))

    def test_same_and_different_ids(self) -> None:
        self.assertFalse(ref_changed(IPAttachment.of("A", 4), IPAttachment.of("A", 4)))
        self.assertTrue(ref_changed(IPAttachment.of("A", 4), IPAttachment.of("B", 4)))


if __name__ == "__main__":
    unittest.main()
