import threading
import unittest

from bson import ObjectId

from relief_api.db import InMemoryDbClient, SupplyRecord


class InMemoryDbClientTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()

    def test_concurrent_registration_creates_one_user(self):
        workers = 8
        barrier = threading.Barrier(workers)
        results = []

        def register():
            barrier.wait()
            results.append(self.db.create_user("A", "race@x.com", "h"))

        threads = [threading.Thread(target=register) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(self.db.list_users()), 1)
        self.assertEqual(len([r for r in results if r is not None]), 1)

    def test_update_and_delete_missing_supply(self):
        created = self.db.create_supply(SupplyRecord(title="Rice"))
        self.assertEqual(self.db.update_supply(created.inserted_id, {"bogus": 1}), 1)
        stored = self.db.collections["supplies"][ObjectId(created.inserted_id)]
        self.assertNotIn("bogus", stored)
        self.assertEqual(self.db.update_supply(str(ObjectId()), {"title": "x"}), 0)
        self.assertEqual(self.db.delete_supply(str(ObjectId())).deleted_count, 0)

    def test_reset_clears_collections(self):
        self.db.create_user("A", "a@x.com", "h")
        self.db.create_supply(SupplyRecord(title="Rice"))
        self.db.reset()
        self.assertEqual(self.db.list_users(), [])
        self.assertEqual(self.db.list_supplies(), [])


if __name__ == "__main__":
    unittest.main()
