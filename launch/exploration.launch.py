#!/usr/bin/env python3
"""
Frontier Exploration Launch File

Starts the frontier explorer with its parameter file. SLAM and Nav2 are
expected to be running already.

Usage:
  ros2 launch drobot_exploration exploration.launch.py
  ros2 launch drobot_exploration exploration.launch.py params_file:=/path/to/params.yaml
"""
import os
from ament_index_python.packages import get_package_share_directory
from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node


def generate_launch_description():
    pkg_share = get_package_share_directory('drobot_exploration')
    default_params = os.path.join(pkg_share, 'config', 'exploration_params.yaml')

    use_sim_time = LaunchConfiguration('use_sim_time')
    params_file = LaunchConfiguration('params_file')

    frontier_explorer = Node(
        package='drobot_exploration',
        executable='frontier_explorer',
        name='frontier_explorer',
        output='screen',
        parameters=[params_file, {'use_sim_time': use_sim_time}],
    )

    return LaunchDescription([
        DeclareLaunchArgument('use_sim_time', default_value='true'),
        DeclareLaunchArgument('params_file', default_value=default_params),
        frontier_explorer,
    ])
