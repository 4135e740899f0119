"""应用层 - 用例编排、事务边界

Application 层职责：
1. 用例编排：协调 Domain 实体、Repository、Domain Service
2. 事务边界：定义事务的开始和结束
3. 输入输出转换：接收输入参数，返回结果

使用示例：
>>> from src.application.use_cases import ManageProjectsUseCase, CreateProjectInput
>>> from src.infrastructure.database.repositories import SQLAlchemyProjectRepository
>>>
>>> use_case = ManageProjectsUseCase(SQLAlchemyProjectRepository(session))
>>> project = use_case.create(CreateProjectInput(name="订单自动化"))
>>> session.commit()
"""
