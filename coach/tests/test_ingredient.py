import unittest

from coach.domain.Ingredient import (
    DetailedIngredient,
    NamedIngredient,
    ingredient_to_dict,
    parse_ingredient,
    render_ingredient,
)


class TestIngredient(unittest.TestCase):

    def test_plain_string_is_named(self):
        ref = parse_ingredient("  2 eggs ")
        self.assertIsInstance(ref, NamedIngredient)
        self.assertEqual(render_ingredient(ref), "2 eggs")

    def test_detailed_renders_quantity_and_unit(self):
        ref = parse_ingredient({"name": "milk", "qty": "200", "unit": "ml"})
        self.assertIsInstance(ref, DetailedIngredient)
        self.assertEqual(render_ingredient(ref), "milk (200 ml)")

    def test_quantity_key_is_accepted(self):
        ref = parse_ingredient({"name": "salmon", "quantity": 150.0, "unit": "g", "extra": True})
        self.assertEqual(ref.qty, 150.0)
        self.assertEqual(render_ingredient(ref), "salmon (150 g)")

    def test_name_only_when_qty_or_unit_missing(self):
        self.assertEqual(render_ingredient(parse_ingredient({"name": "salt"})), "salt")
        self.assertEqual(render_ingredient(parse_ingredient({"name": "salt", "qty": 1})), "salt")
        self.assertEqual(render_ingredient(parse_ingredient({"name": "salt", "unit": "g"})), "salt")

    def test_both_shapes_render_identically(self):
        self.assertEqual(render_ingredient(parse_ingredient("rice")),
                         render_ingredient(parse_ingredient({"name": "rice"})))

    def test_wire_form_keeps_shape(self):
        self.assertEqual(ingredient_to_dict(NamedIngredient("oats")), "oats")
        self.assertEqual(ingredient_to_dict(DetailedIngredient("rice", 100, "g")),
                         {"name": "rice", "qty": 100, "unit": "g"})

    def test_unsupported_shape(self):
        with self.assertRaises(ValueError):
            parse_ingredient(42)


if __name__ == '__main__':
    unittest.main()
