from setuptools import setup, find_packages

setup(
    name='forest-probability-ci',
    version='1.0',
    py_modules=[
        'bayes_debiaser',
        'errors',
        'grouped_variance',
        'leaf_aggregation',
        'prediction_strategy',
        'probability_strategy',
        'sample_data',
    ],
    packages=find_packages(exclude=['tests', 'experiments']),
    python_requires='>=3.10',
    install_requires=['numpy'],
    extras_require={'test': ['pytest']},
    description='Class-probability predictions with grouped-variance confidence intervals for random forests',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)
