from setuptools import find_packages, setup

setup(
    name="rainbow-hat",
    version="0.1.0",
    description="Encode LED, alphanumeric display and buzzer output for the Pimoroni Rainbow HAT",
    author="Garrett Johnson",
    packages=find_packages(include=["rainbow_hat", "rainbow_hat.*"]),
    python_requires=">=3.11",
    install_requires=[
        "numpy>=1.23.0",
    ],
    extras_require={
        "hardware": [
            "spidev>=3.5",
            "smbus2>=0.4.1",
            "RPi.GPIO>=0.7.0",
        ],
        "test": ["pytest>=7.0"],
    },
    tests_require=["pytest"],
)
