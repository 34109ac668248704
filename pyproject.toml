[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chaosbudget"
version = "0.1.0"
description = "Chaos budgets: measure error-rate, latency and availability budgets from Prometheus and decide whether chaos experiments may run."
requires-python = ">=3.10"
dependencies = []
keywords = ["chaos engineering", "error budget", "slo", "prometheus", "reliability"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["chaosbudget"]

[tool.pytest.ini_options]
addopts = "-ra"
