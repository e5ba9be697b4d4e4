from setuptools import find_packages, setup


setup(
    name="machine-provider-openstack",
    version="0.5",
    description="Machine lifecycle orchestration for OpenStack clusters",
    author="Machine Provider Developers",
    license="Apache-2.0",
    packages=find_packages(),
    python_requires=">=3.8",
    install_requires=[
        "Twisted",
        "PyYAML",
        "openstacksdk",
        ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Intended Audience :: Information Technology",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Topic :: System :: Clustering",
        "Topic :: System :: Systems Administration",
       ],
    )
