# imagemark/overrides.py
"""
全局参数与单张图片覆盖参数的解析。

每个实体的 override 是两种状态之一:
    Inherited            使用全局参数
    Overridden(spec)     使用自己的参数

与全局参数完全相同的覆盖会被丢弃，这样之后修改全局参数仍会作用到该图片。
"""
from dataclasses import dataclass, replace

from imagemark.settings import DEFAULT_SPEC, WatermarkSpec


class Inherited:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "INHERITED"


INHERITED = Inherited()


@dataclass(frozen=True)
class Overridden:
    spec: WatermarkSpec


@dataclass(frozen=True)
class GlobalWatermarkState:
    """所有未覆盖的图片共享的参数；修改时生成新值，revision 自增"""
    spec: WatermarkSpec = DEFAULT_SPEC
    revision: int = 0

    def with_spec(self, spec):
        if spec == self.spec:
            return self
        return GlobalWatermarkState(spec, self.revision + 1)


def effective_spec(entity, global_state):
    if isinstance(entity.override, Overridden):
        return entity.override.spec
    return global_state.spec


def set_override(entity, new_spec, global_state):
    """
    设置实体的覆盖参数并返回新实体（旧的合成结果作废）。
    new_spec 与全局参数结构相等时，覆盖被清除。
    """
    if new_spec == global_state.spec:
        override = INHERITED
    else:
        override = Overridden(new_spec)
    return replace(entity, override=override, output=None)


def clear_override(entity):
    return replace(entity, override=INHERITED, output=None)
