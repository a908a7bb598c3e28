"""
Test Fixtures

Common bean classes used across test modules
"""


class Engine:
    """Engine without dependencies"""

    def __init__(self):
        self.started = False


class V8Engine(Engine):
    """Engine subclass"""
    pass


class ElectricEngine(Engine):
    """Another engine subclass"""
    pass


class Car:
    """Car with a constructor-injected engine"""

    def __init__(self, engine: Engine):
        self.engine = engine


class Garage:
    """Garage with a car and an engine"""

    def __init__(self, car: Car, spare: Engine):
        self.car = car
        self.spare = spare


class Radio:
    """Radio used for field and setter injection"""

    def __init__(self):
        self.station = "FM"


class Dashboard:
    """Dashboard with setter-injected radio"""

    def __init__(self):
        self.radio = None

    def set_radio(self, radio: Radio):
        self.radio = radio


class A:
    """First member of an A <-> B cycle"""

    def __init__(self, b: "B" = None):
        self.b = b

    def set_b(self, b: "B"):
        self.b = b


class B:
    """Second member of an A <-> B cycle"""

    def __init__(self, a: A = None):
        self.a = a

    def set_a(self, a: A):
        self.a = a


class C:
    """Third member for longer cycles"""

    def __init__(self, a: A = None):
        self.a = a

    def set_a(self, a: A):
        self.a = a


class Recorder:
    """Records lifecycle events in a shared list"""

    def __init__(self, name: str, log: list):
        self.name = name
        self.log = log
        self.log.append(f"create:{name}")

    def close(self):
        self.log.append(f"destroy:{self.name}")
