"""
Example applet: three keys, three effects.

    python examples/example_applet.py DEV '{"geometry": {"width": 3}}'

Blinking red, solid green and breathing blue, refreshed every poll.
"""

from qapplet import BaseApplet, Effect, Point, Signal, run_applet


class ExampleApplet(BaseApplet):

    async def apply_config(self):
        # Geometry must fit the three points
        return self.width >= 3

    async def run(self):
        points = [[
            Point("#FF0000", Effect.BLINK),
            Point("#00FF00"),
            Point("#0000FF", Effect.BREATHE),
        ]]
        return Signal(
            points,
            name="Example applet",
            message="Red, green and blue",
        )

    async def options(self, field_name, search=None):
        if field_name == "color":
            choices = [
                {"key": "#FF0000", "value": "Red"},
                {"key": "#00FF00", "value": "Green"},
                {"key": "#0000FF", "value": "Blue"},
            ]
            if search:
                choices = [c for c in choices if search.lower() in c["value"].lower()]
            return choices
        return None


if __name__ == "__main__":
    run_applet(ExampleApplet())
