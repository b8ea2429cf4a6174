"""AWS Lambda launching the BNA analyzer on Fargate.

Invoked as a Step Functions task for each city analysis. The function's
handler setting is ``lambdas.fargate_run.handler.lambda_handler``.
"""
