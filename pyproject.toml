[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lmsbridge"
version = "0.1.0"
description = "Audio stream helpers for media bridges: MP4 to ADTS repackaging, PCM packing, WAV/AIFF headers, fades, gapless MP3 info and MIME type negotiation"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "aac", "adts", "mp4", "pcm", "wav", "aiff", "mimetype", "dlna", "gapless", "crossfade"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["lmsbridge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
