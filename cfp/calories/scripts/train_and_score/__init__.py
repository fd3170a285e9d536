"""Fit the feature pipeline, train regressors, write a submission"""
