"""Hoaxify - ユーザーアカウント管理バックエンド"""
