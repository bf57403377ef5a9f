# 2017-01-01T00:00:00Z in Unix seconds.
CUSTOM_EPOCH_S = 1483228800.0

# Steps of 1/8 s are exact in binary floating point, so scripted times
# convert to whole milliseconds without rounding.
TICK = 0.125


class ScriptedTime:
    """Time source returning scripted Unix timestamps, then repeating the last."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def __call__(self) -> float:
        index = min(self.calls, len(self.values) - 1)
        self.calls += 1
        return self.values[index]
