from setuptools import find_packages, setup

package_name = 'rabbitmq_http_client'

setup(
    name=package_name,
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src', exclude=('test',)),
    install_requires=['requests', 'PyYAML'],
    extras_require={
        'test': ['pytest'],
    },
    python_requires='>=3.8',
    zip_safe=True,
    maintainer='Boris',
    maintainer_email='boris@example.com',
    description='Client for the RabbitMQ HTTP management API',
    license='Apache-2.0',
    tests_require=['pytest'],
)
