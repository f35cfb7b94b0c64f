# -*- coding: utf-8 -*-
"""
Injection point declarations

Injection points are declared as class attributes, which makes them explicit
registration-time metadata instead of something discovered from annotations:

    class UserServiceImpl(UserService):
        repository = inject(UserRepository)
        audit = inject(AuditLog, optional=True, lazy=True)
        listeners = inject(Listener, many=True)
        timeout = value("user.timeout", default=timedelta(seconds=5))
"""

from functools import lru_cache
from typing import Any, List, Optional, Tuple, Type, Union


class _Point:
    """Data descriptor storing the injected value in the instance __dict__"""

    def __init__(self):
        self.attr: Optional[str] = None
        self.owner: Optional[Type] = None

    def __set_name__(self, owner: Type, attr: str):
        self.owner = owner
        self.attr = attr

    def _unset(self) -> Any:
        return None

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance.__dict__.get(self.attr, self._unset())

    def __set__(self, instance, value):
        instance.__dict__[self.attr] = value

    def is_set(self, instance) -> bool:
        return self.attr in instance.__dict__


class InjectionPoint(_Point):
    """Slot on a bean filled with another bean (or beans) by the resolver"""

    def __init__(
        self,
        capability: Type,
        name: Optional[str] = None,
        optional: bool = False,
        lazy: bool = False,
        many: bool = False,
        mapping: bool = False,
    ):
        super().__init__()
        if many and mapping:
            raise ValueError("Injection point can not be both 'many' and 'mapping'")
        if lazy and (many or mapping):
            raise ValueError("Collection injection points can not be lazy")
        self.capability = capability
        self.name = name
        self.optional = optional
        self.lazy = lazy
        self.many = many
        self.mapping = mapping

    @property
    def is_collection(self) -> bool:
        return self.many or self.mapping

    def __repr__(self):
        flags = [
            flag
            for flag, on in (
                ("optional", self.optional),
                ("lazy", self.lazy),
                ("many", self.many),
                ("mapping", self.mapping),
            )
            if on
        ]
        name_str = f", name={self.name}" if self.name else ""
        flag_str = f", {', '.join(flags)}" if flags else ""
        return f"inject({getattr(self.capability, '__name__', self.capability)}{name_str}{flag_str}) as '{self.attr}'"


class ValuePoint(_Point):
    """Slot on a bean bound to a configuration value"""

    def __init__(self, key: str, default: Any = None, kind: Optional[type] = None):
        super().__init__()
        self.key = key
        self.default = default
        self.kind = kind or (type(default) if default is not None else str)

    def _unset(self) -> Any:
        return self.default

    def __repr__(self):
        return f"value({self.key!r}, default={self.default!r}) as '{self.attr}'"


def inject(
    capability: Type,
    name: Optional[str] = None,
    optional: bool = False,
    lazy: bool = False,
    many: bool = False,
    mapping: bool = False,
) -> Any:
    """
    Declare an injection point

    Args:
        capability: Capability (class or declared protocol) the injected bean must satisfy
        name: Restrict candidates to beans with this name
        optional: Leave the attribute unset instead of failing when nothing matches
        lazy: Inject through a lazy proxy; lazy edges may close dependency cycles
        many: Inject a list of every match
        mapping: Inject a dict {bean name: object} of every match
    """
    return InjectionPoint(capability, name, optional, lazy, many, mapping)


def value(key: str, default: Any = None, kind: Optional[type] = None) -> Any:
    """
    Declare a configuration value point

    Args:
        key: Property key
        default: Value used when the key is missing or can not be converted
        kind: One of str, int, bool, float, timedelta; defaults to type(default)
    """
    return ValuePoint(key, default, kind)


@lru_cache(maxsize=None)
def declared_points(cls: Type) -> Tuple[Union[InjectionPoint, ValuePoint], ...]:
    """All points of a class in declaration order, base classes first"""
    points = {}
    for klass in reversed(cls.__mro__):
        for attr, member in vars(klass).items():
            if isinstance(member, (InjectionPoint, ValuePoint)):
                # Redefinition in a subclass replaces the base declaration in place
                points[attr] = member
    return tuple(points.values())


def injection_points(cls: Type) -> List[InjectionPoint]:
    return [p for p in declared_points(cls) if isinstance(p, InjectionPoint)]


def value_points(cls: Type) -> List[ValuePoint]:
    return [p for p in declared_points(cls) if isinstance(p, ValuePoint)]
