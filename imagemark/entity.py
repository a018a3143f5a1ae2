# imagemark/entity.py
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from PIL import Image

from imagemark.overrides import INHERITED, Inherited, Overridden


@dataclass(frozen=True)
class FileInfo:
    name: str
    size: int


def new_id():
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ImageEntity:
    """
    一张待加水印的图片。

    source 在解码后归该实体独占且不会被修改；output 是最近一次合成结果，
    每次重新渲染都会替换为新的图像对象，而不是原地修改。
    """
    source: Image.Image
    file: FileInfo
    id: str = field(default_factory=new_id)
    override: Any = INHERITED
    output: Optional[Image.Image] = field(default=None, compare=False)

    @property
    def uses_global(self):
        return isinstance(self.override, Inherited)

    @property
    def display_image(self):
        """尚未渲染时显示未加水印的原图"""
        return self.output if self.output is not None else self.source

    @property
    def custom_spec(self):
        if isinstance(self.override, Overridden):
            return self.override.spec
        return None
