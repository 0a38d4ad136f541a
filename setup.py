from setuptools import setup, find_packages

setup(name='drainio',
      version='0.0.3',
      description='Drain non-blocking byte streams into growable buffers, one resumable step at a time',
      classifiers=[
          "Programming Language :: Python :: 3",
          "License :: OSI Approved :: MIT License",
          "Operating System :: POSIX",
      ],
      keywords='async io buffer stream',
      license='MIT',
      python_requires='>=3.11',
      packages=find_packages(include=['drainio', 'drainio.*']),
      install_requires=[
          'trio',
          'outcome',
      ],
      extras_require={
          'test': ['hypothesis', 'pytest'],
      },
)
