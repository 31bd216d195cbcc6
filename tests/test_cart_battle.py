"""
Unit tests for cart arithmetic and battle setup
"""

import random
import unittest
from decimal import Decimal

from lfdc.app.models import CartItem, GameDetails, GameEntity, Product
from lfdc.app.services.battle import BattleSetup, options_for, pick_distinct, randomize_battle
from lfdc.app.services.cart import cart_count, cart_total, find_item, line_key


def item(product_id, price, quantity, size=None):
    return CartItem(product=Product(id=product_id, name=product_id, price=Decimal(price)), quantity=quantity, size=size)


class TestCart(unittest.TestCase):
    """Test cases for cart helpers"""

    def setUp(self):
        self.items = [item("tee", "799", 2, "M"), item("tee", "799", 1, "L"), item("cap", "349.50", 1)]

    def test_total(self):
        self.assertEqual(cart_total(self.items), Decimal("2746.50"))
        self.assertEqual(cart_total([]), Decimal("0"))

    def test_count(self):
        self.assertEqual(cart_count(self.items), 4)

    def test_same_product_different_sizes_are_different_lines(self):
        self.assertNotEqual(line_key("tee", "M"), line_key("tee", "L"))
        self.assertEqual(find_item(self.items, "tee", "L").quantity, 1)
        self.assertEqual(find_item(self.items, "tee", "M").quantity, 2)

    def test_find_item_without_size(self):
        self.assertEqual(find_item(self.items, "cap", None).product.id, "cap")
        self.assertIsNone(find_item(self.items, "cap", "M"))
        self.assertIsNone(find_item(self.items, "hoodie", "M"))


def entities(prefix, count):
    return [GameEntity(id=f"{prefix}{i}", name=f"{prefix.upper()} {i}") for i in range(count)]


class TestBattleSetup(unittest.TestCase):
    """Test cases for battle picking"""

    def setUp(self):
        self.details = GameDetails(
            characters=entities("c", 5),
            weapons=entities("w", 4),
            stages=entities("s", 3),
            announcers=entities("a", 2),
        )

    def test_randomize_picks_distinct_fighters_and_weapons(self):
        rng = random.Random(7)
        for _ in range(20):
            setup = randomize_battle(self.details, rng)
            self.assertTrue(setup.is_complete())
            self.assertNotEqual(setup.p1.id, setup.p2.id)
            self.assertNotEqual(setup.w1.id, setup.w2.id)
            self.assertEqual(setup.narration, "")

    def test_not_enough_options(self):
        with self.assertRaises(ValueError):
            pick_distinct(entities("c", 1), 2)
        details = self.details.model_copy(update={"weapons": entities("w", 1)})
        with self.assertRaises(ValueError):
            randomize_battle(details)

    def test_incomplete_setup_cannot_fight(self):
        setup = BattleSetup(p1=self.details.characters[0])
        with self.assertRaises(ValueError) as ctx:
            setup.to_request()
        self.assertEqual(str(ctx.exception), "Please select all options")

    def test_request_carries_ids(self):
        setup = randomize_battle(self.details, random.Random(1))
        request = setup.to_request()
        self.assertEqual(request.character_id1, setup.p1.id)
        self.assertEqual(request.weapon_id2, setup.w2.id)
        self.assertEqual(request.announcer_id, setup.announcer.id)

    def test_changing_a_slot_clears_narration(self):
        setup = randomize_battle(self.details, random.Random(1))
        setup.narration = "Boom."
        changed = setup.with_slot("stage", self.details.stages[2])
        self.assertEqual(changed.stage.id, "s2")
        self.assertEqual(changed.narration, "")
        with self.assertRaises(ValueError):
            setup.with_slot("referee", None)

    def test_state_round_trip(self):
        setup = randomize_battle(self.details, random.Random(3))
        setup.narration = "Boom."
        restored = BattleSetup.from_state(setup.to_state())
        self.assertEqual(restored, setup)
        self.assertEqual(BattleSetup.from_state(None), BattleSetup())

    def test_options_for_slot(self):
        self.assertEqual(len(options_for(self.details, "p2")), 5)
        self.assertEqual(len(options_for(self.details, "announcer")), 2)


if __name__ == '__main__':
    unittest.main()
