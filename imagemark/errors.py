# imagemark/errors.py


class ImagemarkError(Exception):
    """所有 imagemark 异常的基类"""


class DecodeFailure(ImagemarkError):
    """源图或 logo 无法解码为位图"""

    def __init__(self, name, reason):
        super().__init__(f"无法解码 {name}: {reason}")
        self.name = name
        self.reason = reason


class EncodeFailure(ImagemarkError):
    """导出时无法把结果编码为目标格式"""


class VideoError(ImagemarkError):
    pass


class VideoNotFound(VideoError):
    pass
