import unittest

from gsreconcile.plan import AttributeUpdate, Operation, OperationKind, validate_plan_order


def _update(seq: int) -> Operation:
    return Operation(
        seq=seq,
        kind=OperationKind.UPDATE_ATTRIBUTES,
        attributes=AttributeUpdate(name="web", cores=1, memory_gb=1),
    )


class TestOrdering(unittest.TestCase):
    def test_valid_order(self) -> None:
        validate_plan_order(
            [
                Operation(seq=0, kind=OperationKind.SHUTDOWN),
                _update(1),
                Operation(seq=2, kind=OperationKind.UNLINK_ISO, target_id="I"),
                Operation(seq=3, kind=OperationKind.START),
            ]
        )

    def test_empty_plan_is_valid(self) -> None:
        validate_plan_order([])

    def test_seq_gap_rejected(self) -> None:
        with self.assertRaises(ValueError):
            validate_plan_order([Operation(seq=1, kind=OperationKind.START)])

    def test_update_after_peripheral_rejected(self) -> None:
        with self.assertRaises(ValueError):
            validate_plan_order(
                [
                    Operation(seq=0, kind=OperationKind.UNLINK_STORAGE, target_id="S"),
                    _update(1),
                ]
            )

    def test_delete_must_be_last(self) -> None:
        with self.assertRaises(ValueError):
            validate_plan_order(
                [
                    Operation(seq=0, kind=OperationKind.DELETE),
                    Operation(seq=1, kind=OperationKind.START),
                ]
            )


if __name__ == "__main__":
    unittest.main()
